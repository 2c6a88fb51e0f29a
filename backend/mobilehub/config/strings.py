# /mobilehub/config/strings.py

# This file contains all user-facing strings, making them easy to manage,
# update, and eventually localize without changing application logic.
# Placeholders are filled with str.format().

# Greeting
WELCOME_MESSAGE = """👋 Namaste{name}! Welcome to *{store_name}*.

We sell quality-checked pre-owned phones with warranty. 📱

Tell me what you're looking for, for example:
• *iPhone 13 under 50k*
• *Samsung Galaxy S23 price*
• *Budget 15000 phone*"""

# Search results
MATCH_HEADLINE_DEFAULT = "Great news! We have {count} phone(s) available that match your requirements."
MATCH_HEADLINE_AVAILABILITY = "✅ Yes! We have {count} phone(s) in stock right now:"
MATCH_HEADLINE_PRICE = "💰 Here are the current prices for {count} phone(s):"
MATCH_HEADLINE_PURCHASE = "🛒 Great choice! Here are {count} phone(s) ready for you:"
MATCH_CALL_TO_ACTION = "Reply with the number to know more or buy!"

SUGGESTION_HEADLINE = "We don't have an exact match, but here are some similar options you might like:"
SUGGESTION_CLOSING = "Let us know if any of these interest you, or tell us more about what you need."

NO_MATCH_MESSAGE = (
    "Sorry, we currently don't have phones matching your requirements. "
    "Please check back later or tell us your preferences and we'll notify you when available!"
)

SEARCH_UNAVAILABLE_MESSAGE = (
    "Sorry, we couldn't check our stock right now. "
    "Please try again in a few minutes, or tell us what you're looking for and our team will get back to you!"
)

# Deep link
INQUIRY_MESSAGE = "Hi! I'm interested in the {brand} {model}{variant} listed at {price}. Is it still available?"

# Catalog
CATALOG_HEADER = "📱 *Available Phones at {store_name}*\n"
CATALOG_DIVIDER = "━━━━━━━━━━━━━━━━━━━━━\n"
CATALOG_EMPTY = "Currently no phones available. Please check back later!\n"
CATALOG_FOOTER = "📞 WhatsApp: {whatsapp}\n📍 {location} | 🛡️ {warranty}"
CATALOG_MESSAGE = "{count} phone(s) currently available."

# Fallbacks
DEFAULT_WARRANTY = "Seller Warranty"
NOT_AVAILABLE = "N/A"

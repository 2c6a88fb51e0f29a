# /mobilehub/config/rules.py

import re

# This file contains the "rules engine" for understanding customer messages.
# Every table here is ordered: the first entry that matches wins.

# Brand tokens in scan order. Aliases map to the canonical brand name; any
# token without an alias is capitalised as its own canonical form.
BRAND_TOKENS = [
    "apple", "iphone", "samsung", "galaxy", "oneplus", "xiaomi",
    "redmi", "vivo", "oppo", "realme", "google", "pixel",
]

BRAND_ALIASES = {
    "iphone": "Apple",
    "galaxy": "Samsung",
    "redmi": "Xiaomi",
    "pixel": "Google",
}

# Known phone naming conventions. Matched against the lower-cased message.
MODEL_PATTERNS = [
    re.compile(r"iphone\s*\d+(?:\s*(?:pro|plus|max)\b)*"),
    re.compile(r"galaxy\s*[samz]?\s*\d+"),
    re.compile(r"oneplus\s*\d+(?:\s*(?:pro|r|t)\b)?"),
    re.compile(r"redmi\s*note\s*\d+"),
    re.compile(r"pixel\s*\d+a?\b(?:\s*pro\b)?"),
]

# Budget expressions. Group 1 is always the amount: digits with optional
# thousands separators and an optional trailing "k" (x1000).
_AMOUNT = r"(\d+(?:,\d+)*k?)"
_CURRENCY = r"(?:rs\.?|₹|inr)"

BUDGET_PATTERNS = [
    re.compile(rf"(?:under|below|within|upto|up\s+to|max|budget)\s*{_CURRENCY}?\s*{_AMOUNT}"),
    re.compile(rf"{_AMOUNT}\s*{_CURRENCY}?\s*(?:budget|max|ke\s*andar)"),
    re.compile(rf"{_CURRENCY}\s*{_AMOUNT}"),
]

# Keyword-driven intent rules, highest priority first.
# Each rule is a tuple: (intent_name, suggested_action, [substrings])
# Matching is substring based on the lower-cased text, so colloquial phrases
# like "hai kya" work without tokenisation.
KEYWORD_INTENT_RULES = [
    ("availability_check", "check_availability", ["available", "stock", "hai kya"]),
    ("price_inquiry", "get_price", ["price", "rate", "kitne"]),
    ("purchase_intent", "connect_sales", ["buy", "kharidna", "lena hai"]),
]

GREETING_KEYWORDS = ["hi", "hello", "namaste"]

# Condition grade -> customer facing label
CONDITION_LABELS = {
    "A+": "Like New",
    "A": "Excellent",
    "B+": "Very Good",
    "B": "Good",
    "C": "Fair",
    "D": "Acceptable",
}

# Inventory status values
STATUS_AVAILABLE = "Available"
STATUS_ANY = "all"

# Largest rupee amount whose paise value fits MongoDB's 8-byte integers.
MAX_PRICE_RUPEES = (2 ** 63 - 1) // 100

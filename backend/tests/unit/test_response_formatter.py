# backend/tests/unit/test_response_formatter.py

from urllib.parse import unquote

import pytest

from mobilehub.config import strings
from mobilehub.models.domain import Intent, InventoryItem, MatchResult
from mobilehub.services.response_formatter import ResponseFormatter, StoreProfile, format_inr


@pytest.fixture
def formatter():
    return ResponseFormatter(StoreProfile(
        name="MobileHub Delhi",
        whatsapp_number="+919910724940",
        location="Delhi NCR",
        warranty_note="6 Month Warranty",
    ))


@pytest.fixture
def items(sample_phones):
    return [InventoryItem.from_document(doc) for doc in sample_phones]


@pytest.mark.parametrize("amount, expected", [
    (0, "₹0"),
    (999, "₹999"),
    (52999, "₹52,999"),
    (129900, "₹1,29,900"),
    (12345678, "₹1,23,45,678"),
    (45999.0, "₹45,999"),
])
def test_format_inr_uses_indian_grouping(amount, expected):
    assert format_inr(amount) == expected


class TestFormatItem:

    def test_structured_fields(self, formatter, items):
        data = formatter.format_item(items[0])
        assert data["name"] == "Apple iPhone 13"
        assert data["price"] == "₹45,999"
        assert data["price_raw"] == 45999
        assert data["original_price"] == "₹69,900"
        assert data["discount_percent"] == 34
        assert data["condition"] == "Excellent"
        assert data["battery"] == 89
        assert data["warranty"] == "6 Month Warranty"

    def test_defaults_for_missing_fields(self, formatter, items):
        data = formatter.format_item(items[3])
        assert data["original_price"] is None
        assert data["discount_percent"] == 0
        assert data["warranty"] == strings.DEFAULT_WARRANTY

    def test_unknown_condition_grade_passes_through(self, formatter, sample_phones):
        doc = dict(sample_phones[0], condition_grade="Refurb")
        data = formatter.format_item(InventoryItem.from_document(doc))
        assert data["condition"] == "Refurb"

    def test_whatsapp_link_prefills_inquiry(self, formatter, items):
        link = formatter.format_item(items[0])["whatsapp_link"]
        prefix = "https://wa.me/919910724940?text="
        assert link.startswith(prefix)
        assert " " not in link
        assert unquote(link[len(prefix):]) == (
            "Hi! I'm interested in the Apple iPhone 13 (128GB) listed at ₹45,999. Is it still available?"
        )

    def test_whatsapp_details_text(self, formatter, items):
        text = formatter.whatsapp_details(items[0])
        assert "📱 *Apple iPhone 13*" in text
        assert "(MRP: ₹69,900)" in text
        assert "🔋 89%" in text
        assert "📝 Box and bill available" in text


class TestFormatMatchResult:

    def test_exact_matches(self, formatter, items):
        result = MatchResult(matches=[items[0], items[2]], message="ok")
        formatted = formatter.format_match_result(result)

        text = formatted["text"]
        assert text.startswith(strings.MATCH_HEADLINE_DEFAULT.format(count=2))
        assert "1. *Apple iPhone 13 (128GB)*\n   💰 ₹45,999\n   ⭐ Excellent" in text
        assert "2. *Samsung Galaxy S23 (256GB)*" in text
        assert text.endswith("Reply with the number to know more or buy!")

        structured = formatted["structured"]
        assert structured["count"] == 2
        assert [d["name"] for d in structured["data"]] == ["Apple iPhone 13", "Samsung Galaxy S23"]
        assert structured["suggestions"] == []

    @pytest.mark.parametrize("intent, headline", [
        (Intent.AVAILABILITY_CHECK, strings.MATCH_HEADLINE_AVAILABILITY),
        (Intent.PRICE_INQUIRY, strings.MATCH_HEADLINE_PRICE),
        (Intent.PURCHASE_INTENT, strings.MATCH_HEADLINE_PURCHASE),
        (Intent.PRODUCT_SEARCH, strings.MATCH_HEADLINE_DEFAULT),
    ])
    def test_headline_follows_intent(self, formatter, items, intent, headline):
        formatted = formatter.format_match_result(MatchResult(matches=[items[0]]), intent)
        assert formatted["text"].startswith(headline.format(count=1))

    def test_suggestions_only(self, formatter, items):
        result = MatchResult(suggestions=[items[4]], relaxation_stage="newest", message=strings.SUGGESTION_HEADLINE)
        formatted = formatter.format_match_result(result)

        assert formatted["text"].startswith(strings.SUGGESTION_HEADLINE)
        assert strings.MATCH_CALL_TO_ACTION not in formatted["text"]
        assert formatted["structured"]["count"] == 0
        assert formatted["structured"]["relaxation_stage"] == "newest"
        assert formatted["structured"]["suggestions"][0]["name"] == "OnePlus 11R"

    def test_nothing_available(self, formatter):
        formatted = formatter.format_match_result(MatchResult(message=strings.NO_MATCH_MESSAGE))
        assert formatted["text"] == strings.NO_MATCH_MESSAGE
        assert formatted["structured"]["data"] == []


class TestFormatCatalog:

    def test_empty_catalog(self, formatter):
        catalog = formatter.format_catalog([])
        assert "no phones available" in catalog["text"]
        assert catalog["text"].startswith("📱 *Available Phones at MobileHub Delhi*")
        assert catalog["summary"] == {"total_available": 0, "brands": [], "price_range": None}
        assert catalog["data"] == []

    def test_catalog_groups_by_brand(self, formatter, items):
        available = [item for item in items if item.status == "Available"]
        catalog = formatter.format_catalog(available)
        text = catalog["text"]

        assert text.index("*Apple*") < text.index("*Samsung*") < text.index("*Xiaomi*") < text.index("*OnePlus*")
        assert "1. iPhone 13 128GB\n   💰 ₹45,999 (-34%)\n   ⭐ Excellent | 🔋 89%" in text
        assert "2. iPhone 14 Pro 256GB" in text
        assert text.endswith("📞 WhatsApp: +919910724940\n📍 Delhi NCR | 🛡️ 6 Month Warranty")

    def test_catalog_summary(self, formatter, items):
        catalog = formatter.format_catalog(items[:3])
        assert catalog["summary"] == {
            "total_available": 3,
            "brands": ["Apple", "Samsung"],
            "price_range": {
                "min": 45999,
                "max": 82999,
                "min_formatted": "₹45,999",
                "max_formatted": "₹82,999",
            },
        }

# /mobilehub/services/response_formatter.py

"""
Response Formatter.

Renders inventory items for two audiences: structured JSON for the workflow
engine, and WhatsApp-ready text for customers (and for priming an AI agent
with the full catalog). Everything here is a pure function of its inputs.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from mobilehub.config import strings
from mobilehub.config.settings import settings
from mobilehub.models.domain import Intent, InventoryItem, MatchResult

MATCH_HEADLINES = {
    Intent.AVAILABILITY_CHECK: strings.MATCH_HEADLINE_AVAILABILITY,
    Intent.PRICE_INQUIRY: strings.MATCH_HEADLINE_PRICE,
    Intent.PURCHASE_INTENT: strings.MATCH_HEADLINE_PURCHASE,
}


def format_inr(amount: float) -> str:
    """Indian digit grouping, no decimals: 129900 -> '₹1,29,900'."""
    rupees = int(round(amount))
    sign = "-" if rupees < 0 else ""
    digits = str(abs(rupees))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups) + "," + tail
    return f"{sign}₹{digits}"


@dataclass(frozen=True)
class StoreProfile:
    name: str
    whatsapp_number: str
    location: str
    warranty_note: str


class ResponseFormatter:
    def __init__(self, store: StoreProfile):
        self.store = store

    # --- Single items ---

    def whatsapp_link(self, item: InventoryItem) -> str:
        """wa.me deep link to the store, pre-filled with an inquiry about this item."""
        number = self.store.whatsapp_number.lstrip("+")
        inquiry = strings.INQUIRY_MESSAGE.format(
            brand=item.brand,
            model=item.model_name,
            variant=f" ({item.variant})" if item.variant else "",
            price=format_inr(item.selling_price),
        )
        return f"https://wa.me/{number}?text={quote(inquiry, safe='')}"

    def whatsapp_details(self, item: InventoryItem) -> str:
        na = strings.NOT_AVAILABLE
        battery = f"{item.battery_health_percent}%" if item.battery_health_percent else na
        text = (
            f"📱 *{item.display_name}*\n"
            f"💾 {item.variant or na} | 🎨 {item.color or na}\n"
            f"⭐ {item.condition_label or na} | 🔋 {battery}\n"
            f"💰 *{format_inr(item.selling_price)}*"
        )
        if item.original_price:
            text += f" (MRP: {format_inr(item.original_price)})"
        text += "\n"
        if item.description:
            text += f"📝 {item.description}\n"
        text += f"🛡️ {item.warranty_type or strings.DEFAULT_WARRANTY}"
        return text

    def format_item(self, item: InventoryItem) -> Dict[str, Any]:
        return {
            "id": item.id,
            "name": item.display_name,
            "brand": item.brand,
            "model": item.model_name,
            "variant": item.variant,
            "color": item.color,
            "condition": item.condition_label,
            "condition_grade": item.condition_grade,
            "battery": item.battery_health_percent,
            "price": format_inr(item.selling_price),
            "price_raw": item.selling_price,
            "original_price": format_inr(item.original_price) if item.original_price else None,
            "discount_percent": item.discount_percent,
            "warranty": item.warranty_type or strings.DEFAULT_WARRANTY,
            "status": item.status,
            "images": item.images,
            "whatsapp_link": self.whatsapp_link(item),
            "whatsapp_text": self.whatsapp_details(item),
        }

    # --- Match results ---

    @staticmethod
    def _numbered_list(items: List[InventoryItem]) -> str:
        entries = []
        for i, item in enumerate(items, start=1):
            name = item.display_name + (f" ({item.variant})" if item.variant else "")
            entries.append(
                f"{i}. *{name}*\n"
                f"   💰 {format_inr(item.selling_price)}\n"
                f"   ⭐ {item.condition_label or strings.NOT_AVAILABLE}"
            )
        return "\n\n".join(entries)

    def format_match_result(self, result: MatchResult, intent: Optional[Intent] = None) -> Dict[str, Any]:
        """
        Returns {"structured": {...}, "text": str} for one match result.
        The text never contains technical details; the worst case is an apology.
        """
        structured = {
            "count": len(result.matches),
            "data": [self.format_item(item) for item in result.matches],
            "suggestions": [self.format_item(item) for item in result.suggestions],
            "relaxation_stage": result.relaxation_stage,
            "message": result.message,
        }

        if result.has_matches:
            headline = MATCH_HEADLINES.get(intent, strings.MATCH_HEADLINE_DEFAULT)
            text = "\n\n".join([
                headline.format(count=len(result.matches)),
                self._numbered_list(result.matches),
                strings.MATCH_CALL_TO_ACTION,
            ])
        elif result.suggestions:
            text = "\n\n".join([
                strings.SUGGESTION_HEADLINE,
                self._numbered_list(result.suggestions),
                strings.SUGGESTION_CLOSING,
            ])
        else:
            text = strings.NO_MATCH_MESSAGE

        return {"structured": structured, "text": text}

    # --- Catalog ---

    def format_catalog(self, items: List[InventoryItem]) -> Dict[str, Any]:
        """
        Bulk catalog for AI agent context: items grouped by brand (in order of
        first appearance), a header, and a closing contact block.
        """
        text = strings.CATALOG_HEADER.format(store_name=self.store.name)
        text += strings.CATALOG_DIVIDER + "\n"

        if not items:
            text += strings.CATALOG_EMPTY
        else:
            by_brand: Dict[str, List[InventoryItem]] = {}
            for item in items:
                by_brand.setdefault(item.brand, []).append(item)

            for brand, brand_items in by_brand.items():
                text += f"*{brand}*\n"
                for i, item in enumerate(brand_items, start=1):
                    discount = f" (-{item.discount_percent}%)" if item.discount_percent > 0 else ""
                    battery = f" | 🔋 {item.battery_health_percent}%" if item.battery_health_percent else ""
                    text += f"{i}. {item.model_name} {item.variant or ''}".rstrip() + "\n"
                    text += f"   💰 {format_inr(item.selling_price)}{discount}\n"
                    text += f"   ⭐ {item.condition_label or strings.NOT_AVAILABLE}{battery}\n\n"

            text += strings.CATALOG_DIVIDER
            text += strings.CATALOG_FOOTER.format(
                whatsapp=self.store.whatsapp_number,
                location=self.store.location,
                warranty=self.store.warranty_note,
            )

        prices = [item.selling_price for item in items]
        summary = {
            "total_available": len(items),
            "brands": list(dict.fromkeys(item.brand for item in items)),
            "price_range": {
                "min": min(prices),
                "max": max(prices),
                "min_formatted": format_inr(min(prices)),
                "max_formatted": format_inr(max(prices)),
            } if prices else None,
        }

        return {
            "data": [self.format_item(item) for item in items],
            "text": text,
            "summary": summary,
        }


# Globally accessible instance
response_formatter = ResponseFormatter(
    StoreProfile(
        name=settings.store_name,
        whatsapp_number=settings.business_whatsapp_number,
        location=settings.store_location,
        warranty_note=settings.store_warranty_note,
    )
)

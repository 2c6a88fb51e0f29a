# /mobilehub/services/query_builder.py

"""
Inventory Query Builder.

Pure functions that translate a classified message (intent + entities) into a
structured InventoryQuery, and render that query as the relative search URL a
workflow engine can call.
"""

from typing import Optional
from urllib.parse import urlencode

from mobilehub.config import rules
from mobilehub.models.domain import ExtractedEntities, Intent, InventoryQuery

DEFAULT_SEARCH_PATH = "/api/phones/search"


def build_inventory_query(intent: Intent, entities: ExtractedEntities, limit: int = 5) -> Optional[InventoryQuery]:
    """
    Build an inventory query from an analysed message.

    Args:
        intent: The classified intent.
        entities: Brand/model/budget pulled from the message.
        limit: Result cap; kept small for conversational replies.

    Returns:
        An InventoryQuery restricted to available phones, or None for greetings
        (no lookup should be issued for a bare greeting).
    """
    if intent == Intent.GREETING:
        return None

    return InventoryQuery(
        brand=entities.brand,
        text=entities.model,
        max_price=entities.budget,
        status=rules.STATUS_AVAILABLE,
        limit=limit,
    )


def build_api_endpoint(query: Optional[InventoryQuery], search_path: str = DEFAULT_SEARCH_PATH) -> str:
    """Renders a query as `<search_path>?brand=..&query=..&maxPrice=..&status=..&limit=..`."""
    if query is None:
        return ""

    params = {}
    if query.brand:
        params["brand"] = query.brand
    if query.text:
        params["query"] = query.text
    if query.max_price is not None:
        params["maxPrice"] = str(query.max_price)
    params["status"] = query.status or rules.STATUS_ANY
    params["limit"] = str(query.limit)

    return f"{search_path}?{urlencode(params)}"

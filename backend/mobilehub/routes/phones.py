# /mobilehub/routes/phones.py

import json
import structlog
from typing import Optional
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import ValidationError

from mobilehub.config import rules
from mobilehub.config.settings import settings
from mobilehub.models.api import PhoneSearchRequest
from mobilehub.models.domain import InventoryQuery
from mobilehub.services.db_service import db_service
from mobilehub.services.inventory_matcher import inventory_matcher
from mobilehub.services.response_formatter import response_formatter
from mobilehub.utils.metrics import response_time_histogram

# Programmatic phone search. Filters arrive pre-structured, so these routes go
# straight to the inventory matcher without message analysis.

router = APIRouter(
    prefix="/phones",
    tags=["Phones"]
)

log = structlog.get_logger(__name__)


def _clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.search_default_limit
    return max(1, min(limit, settings.search_max_limit))


def _status_filter(status: Optional[str]) -> Optional[str]:
    if not status:
        return rules.STATUS_AVAILABLE
    if status.lower() == rules.STATUS_ANY:
        return None
    if status.lower() == rules.STATUS_AVAILABLE.lower():
        return rules.STATUS_AVAILABLE
    return status


async def _run_search(query: InventoryQuery) -> dict:
    result = await inventory_matcher.match(query)
    formatted = response_formatter.format_match_result(result)
    structured = formatted["structured"]
    log.info(
        "Phone search completed",
        brand=query.brand,
        text=query.text,
        max_price=query.max_price,
        count=structured["count"],
        relaxation_stage=result.relaxation_stage,
    )
    return {
        "success": True,
        "count": structured["count"],
        "data": structured["data"],
        "suggestions": structured["suggestions"],
        "text": formatted["text"],
        "message": structured["message"],
    }


@router.get("/search")
async def search_phones(
    query: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[int] = Query(None, ge=0, le=rules.MAX_PRICE_RUPEES, alias="minPrice"),
    max_price: Optional[int] = Query(None, ge=0, le=rules.MAX_PRICE_RUPEES, alias="maxPrice"),
    min_budget: Optional[int] = Query(None, ge=0, le=rules.MAX_PRICE_RUPEES, alias="minBudget"),
    max_budget: Optional[int] = Query(None, ge=0, le=rules.MAX_PRICE_RUPEES, alias="maxBudget"),
    status: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
):
    """Search available phones with query-string filters."""
    with response_time_histogram.labels(endpoint="phone_search").time():
        inventory_query = InventoryQuery(
            brand=brand or None,
            text=query or None,
            min_price=min_price if min_price is not None else min_budget,
            max_price=max_price if max_price is not None else max_budget,
            status=_status_filter(status),
            limit=_clamp_limit(limit),
        )
        return await _run_search(inventory_query)


@router.post("/search")
async def search_phones_post(request: Request):
    """Search available phones with a JSON body, including preferred condition grades."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid request body")

    try:
        search = PhoneSearchRequest.model_validate(body if body is not None else {})
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc")) or "body"
        raise HTTPException(status_code=400, detail=f"Invalid request body: {fields}")

    with response_time_histogram.labels(endpoint="phone_search").time():
        inventory_query = InventoryQuery(
            brand=search.brand or None,
            text=search.query or None,
            min_price=search.min_budget,
            max_price=search.max_budget,
            conditions=search.preferred_condition or [],
            limit=_clamp_limit(search.limit),
        )
        return await _run_search(inventory_query)


@router.get("/{phone_id}")
async def get_phone(phone_id: str):
    """Full details for one phone, any status."""
    item = await db_service.get_phone(phone_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Phone not found")

    data = response_formatter.format_item(item)
    data["description"] = item.description
    data["created_at"] = item.created_at.isoformat() if item.created_at else None
    return {"success": True, "data": data}

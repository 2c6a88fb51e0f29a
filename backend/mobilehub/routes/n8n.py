# /mobilehub/routes/n8n.py

import structlog
from typing import Optional
from fastapi import APIRouter, Query

from mobilehub.config import rules, strings
from mobilehub.config.settings import settings
from mobilehub.models.domain import InventoryQuery, SortOrder
from mobilehub.services.cache_service import cache_service
from mobilehub.services.db_service import db_service
from mobilehub.services.response_formatter import response_formatter
from mobilehub.utils.metrics import response_time_histogram

# Bulk catalog for the workflow engine's AI agent: every available phone,
# newest first, pre-rendered as WhatsApp text plus structured data.

router = APIRouter(
    prefix="/n8n",
    tags=["Workflow"]
)

log = structlog.get_logger(__name__)


async def build_catalog(brand: Optional[str], limit: int) -> dict:
    query = InventoryQuery(
        brand=brand or None,
        status=rules.STATUS_AVAILABLE,
        limit=limit,
        sort=SortOrder.NEWEST,
    )
    items = await db_service.find_phones(query)
    catalog = response_formatter.format_catalog(items)
    return {
        "success": True,
        "count": len(items),
        "data": catalog["data"],
        "suggestions": [],
        "text": catalog["text"],
        "catalog": catalog["text"],
        "message": strings.CATALOG_MESSAGE.format(count=len(items)),
        "summary": catalog["summary"],
    }


@router.get("/available-phones")
async def available_phones(
    brand: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
):
    """Catalog of available phones, optionally filtered by brand."""
    with response_time_histogram.labels(endpoint="catalog").time():
        limit = min(limit or settings.catalog_default_limit, settings.search_max_limit)
        cache_key = f"catalog:{(brand or '').strip().lower()}:{limit}"

        response = await cache_service.get_or_set(
            cache_key,
            lambda: build_catalog(brand, limit),
            ttl=settings.catalog_cache_ttl_seconds,
        )
        log.info("Catalog served", brand=brand, count=response["count"])
        return response

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

# Load environment variables FIRST, before any app imports, so the settings
# object is built from the test configuration.
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env.test")
os.environ.setdefault("ENVIRONMENT", "test")

from mobilehub.main import app  # noqa: E402
from mobilehub.models.domain import InventoryItem, InventoryQuery, SortOrder  # noqa: E402
from mobilehub.services.inventory_store import AbstractInventoryStore  # noqa: E402


def _phone(_id, brand, model_name, price, created_at, **extra):
    doc = {
        "_id": _id,
        "brand": brand,
        "model_name": model_name,
        "selling_price_paise": price * 100,
        "status": "Available",
        "created_at": created_at,
    }
    doc.update(extra)
    return doc


SAMPLE_PHONES = [
    _phone(
        "652f1a000000000000000001", "Apple", "iPhone 13", 45999,
        datetime(2026, 9, 1, tzinfo=timezone.utc),
        variant="128GB", color="Midnight", condition_grade="A", battery_health_percent=89,
        original_mrp_paise=6990000, warranty_type="6 Month Warranty",
        description="Box and bill available", images=["https://cdn.mobilehub.delhi/ip13.jpg"],
    ),
    _phone(
        "652f1a000000000000000002", "Apple", "iPhone 14 Pro", 82999,
        datetime(2026, 10, 1, tzinfo=timezone.utc),
        variant="256GB", color="Deep Purple", condition_grade="A+", battery_health_percent=95,
        original_mrp_paise=12990000,
    ),
    _phone(
        "652f1a000000000000000003", "Samsung", "Galaxy S23", 52999,
        datetime(2026, 9, 15, tzinfo=timezone.utc),
        variant="256GB", color="Phantom Black", condition_grade="B+", battery_health_percent=88,
    ),
    _phone(
        "652f1a000000000000000004", "Xiaomi", "Redmi Note 12", 12499,
        datetime(2026, 8, 20, tzinfo=timezone.utc),
        variant="128GB", condition_grade="B", battery_health_percent=91,
    ),
    _phone(
        "652f1a000000000000000005", "OnePlus", "11R", 27999,
        datetime(2026, 10, 10, tzinfo=timezone.utc),
        variant="128GB", condition_grade="A", battery_health_percent=93,
    ),
    _phone(
        "652f1a000000000000000006", "Google", "Pixel 7a", 24999,
        datetime(2026, 10, 12, tzinfo=timezone.utc),
        variant="128GB", condition_grade="A", status="Sold",
    ),
]


class FakeInventoryStore(AbstractInventoryStore):
    """In-memory store applying the same filter semantics as the MongoDB one."""

    def __init__(self, documents=None):
        self.items = [InventoryItem.from_document(doc) for doc in (documents or [])]
        self.queries: List[InventoryQuery] = []

    @staticmethod
    def _matches(item: InventoryItem, query: InventoryQuery) -> bool:
        if query.status and item.status != query.status:
            return False
        if query.brand and query.brand.lower() not in item.brand.lower():
            return False
        if query.text:
            needle = query.text.lower()
            haystacks = [item.model_name, item.description or "", f"{item.brand} {item.model_name}"]
            if not any(needle in h.lower() for h in haystacks):
                return False
        if query.min_price is not None and item.selling_price_paise < query.min_price * 100:
            return False
        if query.max_price is not None and item.selling_price_paise > query.max_price * 100:
            return False
        if query.conditions and item.condition_grade not in query.conditions:
            return False
        return True

    async def find_phones(self, query: InventoryQuery) -> List[InventoryItem]:
        self.queries.append(query)
        found = [item for item in self.items if self._matches(item, query)]
        if query.sort == SortOrder.NEWEST:
            found.sort(key=lambda item: item.created_at, reverse=True)
        else:
            found.sort(key=lambda item: (item.selling_price_paise, -item.created_at.timestamp()))
        return found[:query.limit]

    async def get_phone(self, phone_id: str) -> Optional[InventoryItem]:
        return next((item for item in self.items if item.id == phone_id), None)


@pytest.fixture
def sample_phones():
    return [dict(doc) for doc in SAMPLE_PHONES]


@pytest.fixture
def fake_store(sample_phones):
    return FakeInventoryStore(sample_phones)


@pytest.fixture
def empty_store():
    return FakeInventoryStore([])


@pytest.fixture(scope="function")
def test_client(mocker, fake_store):
    """
    Provides a TestClient for API integration tests. Startup I/O is patched
    out, the rate limiter is disabled, and the MongoDB store reads from
    `fake_store` instead.
    """
    mocker.patch("mobilehub.services.db_service.db_service.create_indexes", new_callable=AsyncMock)
    mocker.patch("mobilehub.services.db_service.db_service.find_phones", side_effect=fake_store.find_phones)
    mocker.patch("mobilehub.services.db_service.db_service.get_phone", side_effect=fake_store.get_phone)
    mocker.patch("mobilehub.services.cache_service.cache_service.get", new_callable=AsyncMock, return_value=None)
    mocker.patch("mobilehub.services.cache_service.cache_service.set", new_callable=AsyncMock)
    mocker.patch("mobilehub.services.cache_service.cache_service.close", new_callable=AsyncMock)
    mocker.patch("mobilehub.utils.rate_limiter.limiter.enabled", False)

    with TestClient(app) as client:
        yield client

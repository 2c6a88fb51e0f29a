# backend/tests/unit/test_db_service.py

import bson
import pytest
from unittest.mock import AsyncMock, MagicMock
from pydantic import ValidationError

from mobilehub.config import rules
from mobilehub.models.domain import InventoryQuery, SortOrder
from mobilehub.services.db_service import DatabaseService, build_phone_filter, build_phone_sort
from mobilehub.services.inventory_store import InventoryStoreError
from mobilehub.utils.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState


class TestBuildPhoneFilter:

    def test_default_query_filters_on_status_only(self):
        assert build_phone_filter(InventoryQuery()) == {"status": "Available"}

    def test_any_status(self):
        assert build_phone_filter(InventoryQuery(status=None)) == {}

    def test_brand_is_case_insensitive_and_escaped(self):
        mongo_filter = build_phone_filter(InventoryQuery(brand="A+pple"))
        assert mongo_filter["brand"] == {"$regex": r"A\+pple", "$options": "i"}

    def test_text_matches_model_description_or_full_name(self):
        mongo_filter = build_phone_filter(InventoryQuery(text="galaxy s23"))
        clauses = mongo_filter["$or"]
        assert clauses[0] == {"model_name": {"$regex": r"galaxy\ s23", "$options": "i"}}
        assert clauses[1] == {"description": {"$regex": r"galaxy\ s23", "$options": "i"}}
        regex_match = clauses[2]["$expr"]["$regexMatch"]
        assert regex_match["input"] == {"$concat": ["$brand", " ", "$model_name"]}
        assert regex_match["options"] == "i"

    def test_price_bounds_are_converted_to_paise(self):
        mongo_filter = build_phone_filter(InventoryQuery(min_price=10000, max_price=50000))
        assert mongo_filter["selling_price_paise"] == {"$gte": 1000000, "$lte": 5000000}

    def test_zero_budget_is_still_a_bound(self):
        mongo_filter = build_phone_filter(InventoryQuery(max_price=0))
        assert mongo_filter["selling_price_paise"] == {"$lte": 0}

    def test_largest_budget_encodes_as_bson(self):
        mongo_filter = build_phone_filter(InventoryQuery(max_price=rules.MAX_PRICE_RUPEES))
        assert bson.encode(mongo_filter)

    def test_budget_beyond_store_range_is_rejected(self):
        with pytest.raises(ValidationError):
            InventoryQuery(max_price=rules.MAX_PRICE_RUPEES + 1)

    def test_conditions(self):
        mongo_filter = build_phone_filter(InventoryQuery(conditions=["A+", "A"]))
        assert mongo_filter["condition_grade"] == {"$in": ["A+", "A"]}


def test_sort_orders():
    assert build_phone_sort(SortOrder.NEWEST) == [("created_at", -1)]
    assert build_phone_sort(SortOrder.PRICE_ASC) == [("selling_price_paise", 1), ("created_at", -1)]


def _service_with_collection(collection):
    service = DatabaseService("mongodb://localhost:27017", "mobilehub_test", "phones")
    service.phones = collection
    return service


@pytest.mark.asyncio
async def test_find_phones_parses_documents(sample_phones):
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=sample_phones[:2] + [{"_id": "broken"}])
    collection = MagicMock()
    collection.find.return_value = cursor

    service = _service_with_collection(collection)
    items = await service.find_phones(InventoryQuery(brand="Apple", limit=5))

    assert [item.model_name for item in items] == ["iPhone 13", "iPhone 14 Pro"]
    collection.find.assert_called_once_with(build_phone_filter(InventoryQuery(brand="Apple")))
    cursor.sort.assert_called_once_with([("selling_price_paise", 1), ("created_at", -1)])
    cursor.limit.assert_called_once_with(5)


@pytest.mark.asyncio
async def test_find_phones_wraps_driver_errors():
    collection = MagicMock()
    collection.find.side_effect = RuntimeError("connection refused")

    service = _service_with_collection(collection)
    with pytest.raises(InventoryStoreError):
        await service.find_phones(InventoryQuery())


@pytest.mark.asyncio
async def test_get_phone_with_malformed_id_skips_the_store():
    collection = MagicMock()
    collection.find_one = AsyncMock()

    service = _service_with_collection(collection)
    assert await service.get_phone("not-an-object-id") is None
    collection.find_one.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_phone_wraps_driver_errors():
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=RuntimeError("timeout"))

    service = _service_with_collection(collection)
    with pytest.raises(InventoryStoreError):
        await service.get_phone("652f1a000000000000000001")


@pytest.mark.asyncio
async def test_circuit_breaker_opens_after_threshold():
    breaker = CircuitBreaker("test", failure_threshold=2, timeout=60)
    failing = AsyncMock(side_effect=RuntimeError("down"))

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

    assert breaker.state == CircuitState.OPEN
    with pytest.raises(CircuitOpenError):
        await breaker.call(failing)
    assert failing.await_count == 2

# /mobilehub/services/db_service.py

import re
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from bson import ObjectId
from typing import List, Optional, Dict, Any, Tuple

from mobilehub.config.settings import settings
from mobilehub.models.domain import InventoryItem, InventoryQuery, SortOrder
from mobilehub.services.inventory_store import AbstractInventoryStore, InventoryStoreError
from mobilehub.utils.circuit_breaker import CircuitBreaker
from mobilehub.utils.metrics import database_operations_counter

logger = logging.getLogger(__name__)

PAISE_PER_RUPEE = 100


def _icontains(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def build_phone_filter(query: InventoryQuery) -> Dict[str, Any]:
    """
    Translate an InventoryQuery into a MongoDB filter document.

    Brand is a case-insensitive substring match. Free text matches the model
    name, the description, or the combined "<brand> <model_name>" string.
    Price bounds are rupees and are converted to paise.
    """
    mongo_filter: Dict[str, Any] = {}

    if query.status:
        mongo_filter["status"] = query.status

    if query.brand:
        mongo_filter["brand"] = _icontains(query.brand)

    if query.text:
        pattern = re.escape(query.text)
        mongo_filter["$or"] = [
            {"model_name": _icontains(query.text)},
            {"description": _icontains(query.text)},
            {"$expr": {"$regexMatch": {
                "input": {"$concat": ["$brand", " ", "$model_name"]},
                "regex": pattern,
                "options": "i",
            }}},
        ]

    price: Dict[str, int] = {}
    if query.min_price is not None:
        price["$gte"] = query.min_price * PAISE_PER_RUPEE
    if query.max_price is not None:
        price["$lte"] = query.max_price * PAISE_PER_RUPEE
    if price:
        mongo_filter["selling_price_paise"] = price

    if query.conditions:
        mongo_filter["condition_grade"] = {"$in": list(query.conditions)}

    return mongo_filter


def build_phone_sort(sort: SortOrder) -> List[Tuple[str, int]]:
    if sort == SortOrder.NEWEST:
        return [("created_at", -1)]
    return [("selling_price_paise", 1), ("created_at", -1)]


class DatabaseService(AbstractInventoryStore):
    """
    MongoDB-backed inventory store. Reads only; every read goes through a
    circuit breaker and failures surface as InventoryStoreError.
    """

    def __init__(self, mongo_uri: str, db_name: str, phones_collection: str):
        try:
            self.client = AsyncIOMotorClient(
                mongo_uri,
                maxPoolSize=settings.max_pool_size,
                minPoolSize=settings.min_pool_size,
                tls=settings.mongo_ssl,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000
            )
            self.db = self.client[db_name]
            self.phones = self.db[phones_collection]
            self.circuit_breaker = CircuitBreaker("inventory")
            logger.info("MongoDB client initialized successfully.")
        except Exception as e:
            logger.error(f"Error initializing MongoDB client: {e}")
            raise

    # ==================== Index Management ====================

    async def create_indexes(self) -> None:
        """Create the indexes used by inventory searches on startup."""
        indexes = [
            [("status", 1), ("selling_price_paise", 1)],
            [("status", 1), ("created_at", -1)],
            [("brand", 1)],
        ]

        for keys in indexes:
            try:
                await self.phones.create_index(keys)
                logger.debug(f"Created index on phones: {keys}")
            except Exception as e:
                logger.error(f"Failed to create index on phones {keys}: {e}")

        logger.info("Database indexes created successfully.")

    async def health_check(self) -> bool:
        try:
            await self.db.command("ping")
            return True
        except Exception:
            logger.exception("MongoDB health check failed")
            return False

    # ==================== Inventory Reads ====================

    async def find_phones(self, query: InventoryQuery) -> List[InventoryItem]:
        """
        Run an inventory query.

        Args:
            query: Structured filter, sort order and limit.

        Returns:
            Parsed inventory items in the order requested by the query.

        Raises:
            InventoryStoreError: If MongoDB fails or the circuit is open.
        """
        mongo_filter = build_phone_filter(query)

        async def _fetch():
            cursor = self.phones.find(mongo_filter).sort(build_phone_sort(query.sort)).limit(query.limit)
            return await cursor.to_list(length=query.limit)

        try:
            documents = await self.circuit_breaker.call(_fetch)
        except Exception as e:
            logger.exception(f"Inventory query failed: {type(e).__name__}")
            database_operations_counter.labels(operation="find_phones", status="failed").inc()
            raise InventoryStoreError("Failed to query inventory") from e

        database_operations_counter.labels(operation="find_phones", status="success").inc()
        items = [InventoryItem.from_document(doc) for doc in documents]
        return [item for item in items if item is not None]

    async def get_phone(self, phone_id: str) -> Optional[InventoryItem]:
        """Fetch one phone by its ObjectId string; malformed ids return None."""
        if not phone_id or not ObjectId.is_valid(phone_id):
            return None

        try:
            document = await self.circuit_breaker.call(self.phones.find_one, {"_id": ObjectId(phone_id)})
        except Exception as e:
            logger.exception(f"Phone lookup failed for {phone_id}")
            database_operations_counter.labels(operation="get_phone", status="failed").inc()
            raise InventoryStoreError("Failed to query inventory") from e

        database_operations_counter.labels(operation="get_phone", status="success").inc()
        return InventoryItem.from_document(document) if document else None

    def close(self) -> None:
        self.client.close()


# Globally accessible instance
db_service = DatabaseService(settings.mongo_uri, settings.mongo_db_name, settings.phones_collection)

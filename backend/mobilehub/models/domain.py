# /mobilehub/models/domain.py

import logging
from enum import Enum
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Dict, Any

from mobilehub.config import rules

# This file defines the core Pydantic models used by the message analysis and
# inventory matching pipeline. All of them are request-scoped values.

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    GREETING = "greeting"
    AVAILABILITY_CHECK = "availability_check"
    PRICE_INQUIRY = "price_inquiry"
    PURCHASE_INTENT = "purchase_intent"
    PRODUCT_SEARCH = "product_search"
    BUDGET_SEARCH = "budget_search"
    GENERAL_INQUIRY = "general_inquiry"


class SortOrder(str, Enum):
    PRICE_ASC = "price_asc"
    NEWEST = "newest"


class InboundMessage(BaseModel):
    sender: str
    name: Optional[str] = None
    text: str
    message_id: Optional[str] = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExtractedEntities(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    budget: Optional[int] = None
    keywords: List[str] = []


class InventoryQuery(BaseModel):
    """
    A structured inventory filter. Prices are whole rupees and both bounds are
    inclusive. A status of None matches every status.
    """
    brand: Optional[str] = None
    text: Optional[str] = None
    min_price: Optional[int] = Field(default=None, ge=0, le=rules.MAX_PRICE_RUPEES)
    max_price: Optional[int] = Field(default=None, ge=0, le=rules.MAX_PRICE_RUPEES)
    conditions: List[str] = []
    status: Optional[str] = rules.STATUS_AVAILABLE
    limit: int = Field(default=5, ge=1)
    sort: SortOrder = SortOrder.PRICE_ASC

    @property
    def is_unfiltered(self) -> bool:
        return not any([
            self.brand, self.text, self.conditions,
            self.min_price is not None, self.max_price is not None,
        ])


class MessageAnalysis(BaseModel):
    """Everything the pipeline learned about one message."""
    intent: Intent
    suggested_action: str
    entities: ExtractedEntities
    query: Optional[InventoryQuery] = None
    api_endpoint: str = ""


class InventoryItem(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    id: str
    brand: str
    model_name: str
    variant: Optional[str] = None
    color: Optional[str] = None
    condition_grade: Optional[str] = None
    battery_health_percent: Optional[int] = None
    selling_price_paise: int
    original_mrp_paise: Optional[int] = None
    warranty_type: Optional[str] = None
    description: Optional[str] = None
    images: List[str] = []
    status: str = rules.STATUS_AVAILABLE
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model_name}"

    @property
    def selling_price(self) -> float:
        return self.selling_price_paise / 100

    @property
    def original_price(self) -> Optional[float]:
        return self.original_mrp_paise / 100 if self.original_mrp_paise else None

    @property
    def discount_percent(self) -> int:
        if not self.original_mrp_paise or self.original_mrp_paise <= self.selling_price_paise:
            return 0
        return round((self.original_mrp_paise - self.selling_price_paise) / self.original_mrp_paise * 100)

    @property
    def condition_label(self) -> Optional[str]:
        if not self.condition_grade:
            return None
        return rules.CONDITION_LABELS.get(self.condition_grade, self.condition_grade)

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> Optional["InventoryItem"]:
        """
        A factory method to create an InventoryItem from a raw MongoDB document.
        Malformed documents are logged and skipped rather than failing a whole query.
        """
        try:
            return cls(
                id=str(document.get("_id", document.get("id"))),
                brand=document["brand"],
                model_name=document["model_name"],
                variant=document.get("variant"),
                color=document.get("color"),
                condition_grade=document.get("condition_grade"),
                battery_health_percent=document.get("battery_health_percent"),
                selling_price_paise=int(document["selling_price_paise"]),
                original_mrp_paise=document.get("original_mrp_paise"),
                warranty_type=document.get("warranty_type"),
                description=document.get("description"),
                images=document.get("images") or [],
                status=document.get("status", rules.STATUS_AVAILABLE),
                created_at=document.get("created_at"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Could not parse phone document {document.get('_id')}: {e}")
            return None


class MatchResult(BaseModel):
    matches: List[InventoryItem] = []
    suggestions: List[InventoryItem] = []
    relaxation_stage: Optional[str] = None
    message: str = ""

    @model_validator(mode="after")
    def suggestions_only_without_matches(self):
        if self.matches and self.suggestions:
            raise ValueError("suggestions must be empty when exact matches exist")
        return self

    @property
    def has_matches(self) -> bool:
        return bool(self.matches)

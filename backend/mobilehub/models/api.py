# /mobilehub/models/api.py

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, field_validator
from typing import List, Dict, Optional, Union, Any

from mobilehub.config import rules

# This file contains Pydantic models that define the structure of data for
# API requests, ensuring type safety and validation.


class WhatsAppMessageData(BaseModel):
    """The `data` block of a message event forwarded by the workflow engine."""
    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(..., alias="from", min_length=1)
    name: Optional[str] = None
    message: str = Field(..., min_length=1)
    timestamp: Optional[Union[str, int]] = None
    message_id: Optional[str] = Field(None, alias="messageId")


class WebhookPayload(BaseModel):
    # Only "message" events are analysed; "status" and anything else is ignored.
    type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class PhoneSearchRequest(BaseModel):
    """JSON body for the programmatic (POST) search form."""
    query: Optional[str] = None
    brand: Optional[str] = None
    min_budget: Optional[int] = Field(None, ge=0, le=rules.MAX_PRICE_RUPEES, validation_alias=AliasChoices("minBudget", "minPrice"))
    max_budget: Optional[int] = Field(None, ge=0, le=rules.MAX_PRICE_RUPEES, validation_alias=AliasChoices("maxBudget", "maxPrice"))
    limit: Optional[int] = Field(None, ge=1)
    preferred_condition: Optional[List[str]] = Field(None, validation_alias="preferredCondition")

    @field_validator("preferred_condition", mode="before")
    @classmethod
    def wrap_single_condition(cls, v):
        if isinstance(v, str):
            return [v]
        return v

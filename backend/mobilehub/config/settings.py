# /mobilehub/config/settings.py

import sys
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # MongoDB (inventory store)
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "mobilehub"
    phones_collection: str = "phones"
    max_pool_size: int = 10
    min_pool_size: int = 1
    mongo_ssl: bool = False

    # Redis (catalog cache)
    redis_url: str = "redis://localhost:6379"
    catalog_cache_ttl_seconds: int = 60

    # Security
    webhook_secret: str | None = None  # HMAC secret for X-Hub-Signature-256, verification is skipped when unset
    api_key: str | None = None

    # Deployment
    workers: int = 4
    environment: str = Field(default="production", env="ENVIRONMENT")
    log_level: str = "INFO"
    api_prefix: str = "/api"

    cors_allowed_origins: List[str] = Field(
        default=[
            "https://mobilehub.delhi",
            "https://admin.mobilehub.delhi",
        ]
    )

    allowed_hosts: str = Field(
        default="mobilehub.delhi,*.mobilehub.delhi,localhost,127.0.0.1",
        env="ALLOWED_HOSTS"
    )

    # Rate limiting
    rate_limit_per_minute: int = 100

    # Matching & search limits
    conversational_result_limit: int = 5
    search_default_limit: int = 10
    search_max_limit: int = 50
    catalog_default_limit: int = 50
    suggestion_limit: int = 3
    budget_relaxation_factor: float = 1.2
    webhook_inline_reply: bool = True

    # Store profile (used in WhatsApp texts and deep links)
    store_name: str = "MobileHub Delhi"
    business_whatsapp_number: str = "+919910724940"
    store_location: str = "Delhi NCR"
    store_warranty_note: str = "6 Month Warranty"
    site_url: str = "https://mobilehub.delhi"

    # ---------------- Validators ---------------- #

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_allowed_origins(cls, v):
        """
        Accept both a comma-separated string and a list, so the value can be
        supplied as a plain environment variable.
        """
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("business_whatsapp_number")
    @classmethod
    def whatsapp_number_must_be_digits(cls, v):
        digits = v[1:] if v.startswith("+") else v
        if not digits.isdigit():
            raise ValueError("BUSINESS_WHATSAPP_NUMBER must contain only digits and an optional leading '+'")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def validate_environment(settings_obj: Settings):
    try:
        if settings_obj.budget_relaxation_factor < 1.0:
            raise ValueError("BUDGET_RELAXATION_FACTOR must be at least 1.0")

        for var in [
            "conversational_result_limit", "search_default_limit", "search_max_limit",
            "catalog_default_limit", "suggestion_limit",
        ]:
            if getattr(settings_obj, var) <= 0:
                raise ValueError(f"{var.upper()} must be a positive integer")

        if settings_obj.search_default_limit > settings_obj.search_max_limit:
            raise ValueError("SEARCH_DEFAULT_LIMIT cannot exceed SEARCH_MAX_LIMIT")

        return settings_obj

    except Exception as e:
        print(f"--- [ERROR] Environment validation failed: {e}")
        sys.exit(1)


settings = Settings()
validate_environment(settings)

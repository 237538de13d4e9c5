from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Retail Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./retail_ledger.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_SQL: bool = False

    # ==============================
    # Security
    # ==============================
    API_KEYS: Optional[str] = None
    API_KEY_HEADER: str = "X-API-Key"

    # ==============================
    # Sales policy
    # ==============================
    MAX_INSTALLMENTS: int = 10
    INSTALLMENT_ROUNDING_UNIT: Decimal = Decimal("1")

    # ==============================
    # Monthly summaries
    # ==============================
    SUMMARY_BATCH_ENABLED: bool = True
    SUMMARY_WRITE_THRESHOLD: int = 20

    # ==============================
    # Listing
    # ==============================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    @field_validator("MAX_INSTALLMENTS", "SUMMARY_WRITE_THRESHOLD", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("INSTALLMENT_ROUNDING_UNIT")
    @classmethod
    def _positive_unit(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("rounding unit must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]

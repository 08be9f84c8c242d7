"""Application settings loaded from the environment (prefix ``POS_``) or a .env file."""
import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Settings(BaseSettings):
    # Storage
    DB_PATH: str = os.path.join(BASE_DIR, "pos_sales.db")
    RECEIPTS_DIR: str = os.path.join(BASE_DIR, "receipts")

    # Business
    BUSINESS_NAME: str = "Dale Convenience"
    CURRENCY: str = "USD"
    TAX_RATE: float = 0.0
    LOW_STOCK_THRESHOLD: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    return Settings()

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    offer_api_url: str = Field("http://localhost:5133", alias="OFFER_API_URL")
    cache_db: str = Field("offer_cache.db", alias="OFFER_CACHE_DB")
    request_timeout_s: Optional[float] = Field(None, alias="OFFER_TIMEOUT_S")
    airports: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["JFK", "LAX", "ORD"], alias="AIRPORTS"
    )
    currencies: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["USD", "EUR"], alias="CURRENCIES"
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="OFFER_LOG_FILE")

    @field_validator("offer_api_url")
    @classmethod
    def _url_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("OFFER_API_URL must be a non-empty string")
        return v.strip()

    @field_validator("request_timeout_s")
    @classmethod
    def _timeout_positive(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("OFFER_TIMEOUT_S must be greater than 0")
        return v

    @field_validator("airports", "currencies", mode="before")
    @classmethod
    def _split_codes(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        return [a.strip().upper() for a in v if a and a.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]

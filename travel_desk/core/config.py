from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so the frontend and backend can share one .env.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Travel Desk"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    booking_api_base_url: str = Field(default="http://localhost:5000", alias="BOOKING_API_BASE_URL")
    booking_api_timeout_seconds: float = Field(default=20.0, alias="BOOKING_API_TIMEOUT_SECONDS")
    company_id: Optional[str] = Field(default=None, alias="COMPANY_ID")
    credentials_path: str = Field(default=".travel_desk_credentials.json", alias="CREDENTIALS_PATH")

    agency_name: str = Field(default="MUSTAFA TRAVELS & TOUR", alias="AGENCY_NAME")
    agency_short_name: str = Field(default="MUSTAFA TRAVEL", alias="AGENCY_SHORT_NAME")
    agency_tagline: str = Field(default="Luxury Umrah Partner", alias="AGENCY_TAGLINE")
    agency_email: str = Field(default="info@mustafatravelsandtour.com", alias="AGENCY_EMAIL")
    agency_phone: str = Field(default="+1 845-359-3888", alias="AGENCY_PHONE")
    agency_website: str = Field(default="www.mustafatravelsandtour.com", alias="AGENCY_WEBSITE")
    document_prefix: str = Field(default="Mustafa-Travel", alias="DOCUMENT_PREFIX")

    @field_validator("booking_api_base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and "://" not in value:
            value = f"https://{value}"
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]

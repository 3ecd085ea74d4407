from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application configuration."""

    app_name: str = Field(default="Booking Orchestration API")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Credentials
    api_key_prefix: str = Field(
        default="cal_",
        validation_alias=AliasChoices("API_KEY_PREFIX", "API_KEYPREFIX"),
    )

    # MongoDB
    mongo_uri: str = Field(default="mongodb://localhost:27017")
    mongo_database: str = Field(default="bookings")
    api_keys_collection: str = Field(default="api_keys")
    partners_collection: str = Field(default="partner_clients")

    # Collaborating services
    booking_engine_url: str = Field(default="http://localhost:3000")
    token_introspection_url: str = Field(
        default="",
        validation_alias=AliasChoices("TOKEN_INTROSPECTION_URL", "OAUTH_INTROSPECTION_URL"),
    )
    billing_api_url: str = Field(default="")
    billing_api_key: str = Field(default="")
    http_timeout: float = Field(default=10.0)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

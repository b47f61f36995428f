"""
Application configuration models and helpers.

Centralizes settings management so the HTTP layer, the correlation protocol and
the operational scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import os

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class ProviderSettings(BaseSettings):
    """Identity provider registration and the plugin origin allowed by CORS."""

    model_config = SettingsConfigDict(populate_by_name=True)

    client_id: str = Field(..., validation_alias="CLIENT_ID")
    client_secret: str = Field(..., validation_alias="CLIENT_SECRET", repr=False)
    redirect_uri: str = Field(..., validation_alias="REDIRECT_URI")
    scope: str = Field(..., validation_alias="SCOPE")
    authorize_endpoint: AnyHttpUrl = Field(..., validation_alias="AUTHORIZE_ENDPOINT")
    token_endpoint: AnyHttpUrl = Field(..., validation_alias="TOKEN_ENDPOINT")
    plugin_uri: str = Field(
        ...,
        validation_alias="PLUGIN_URI",
        description="Value sent back in the Access-Control-Allow-Origin header.",
    )


class StoreSettings(BaseSettings):
    """Selects and configures the ephemeral key-value store backend."""

    model_config = SettingsConfigDict(populate_by_name=True)

    backend: Literal["memory", "sqlite", "dynamodb"] = Field(
        "sqlite", validation_alias="STORE_BACKEND"
    )
    sqlite_path: str = Field(
        "data/relay_store.db",
        validation_alias="STORE_SQLITE_PATH",
    )
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    dynamodb_table_name: Optional[str] = Field(
        None,
        validation_alias="DYNAMODB_TABLE_NAME",
        description=(
            "Table with a string 'pk' hash key and TTL enabled on 'expires_at'."
        ),
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        repr=False,
        description=(
            "Secret used to derive the symmetric key for sealing token bundles "
            "while they wait to be polled."
        ),
    )


class RelaySettings(BaseSettings):
    """Lifetimes of the correlation records and the confirmation page text."""

    model_config = SettingsConfigDict(populate_by_name=True)

    ticket_ttl_seconds: int = Field(60, validation_alias="TICKET_TTL_SECONDS")
    tokens_ttl_seconds: int = Field(300, validation_alias="TOKENS_TTL_SECONDS")
    confirmation_message: str = Field(
        "Authentication successful! You can close this window and return to the plugin.",
        validation_alias="CONFIRMATION_MESSAGE",
    )


class AppSettings(BaseSettings):
    """Root settings object for the relay application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ProviderSettings",
    "RelaySettings",
    "SecuritySettings",
    "StoreSettings",
    "get_settings",
]

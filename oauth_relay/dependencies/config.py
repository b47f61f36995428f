"""
FastAPI dependency utilities for injecting configuration.
"""

from functools import lru_cache

from fastapi import Depends

from oauth_relay.core.config import AppSettings, ProviderSettings, get_settings


@lru_cache()
def _settings_singleton() -> AppSettings:
    """Ensure configuration is created once per process."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings_singleton()


def get_provider_settings(
    settings: AppSettings = Depends(get_app_settings),
) -> ProviderSettings:
    """FastAPI dependency returning the provider configuration for one request."""
    return settings.provider


__all__ = ["get_app_settings", "get_provider_settings"]

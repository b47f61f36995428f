"""
FastAPI application entrypoint for the OAuth relay.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from oauth_relay.api.routes import cors_headers, redact_secrets, router as api_router
from oauth_relay.core.config import AppSettings, get_settings
from oauth_relay.core.logging import configure_logging
from oauth_relay.dependencies import get_app_settings

logger = logging.getLogger(__name__)


def _request_settings(request: Request) -> AppSettings:
    """Resolve settings the same way route dependencies do, overrides included."""
    factory = request.app.dependency_overrides.get(get_app_settings, get_app_settings)
    return factory()


def _fallback_settings(request: Request) -> Optional[AppSettings]:
    try:
        return _request_settings(request)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Settings unavailable while reporting an error")
        return None


async def request_boundary(request: Request, call_next) -> Response:
    """Turn any unhandled failure into a readable 500 for the plugin.

    When settings themselves cannot be loaded, only the exception class is
    reported and the CORS header is left off.
    """
    try:
        return await call_next(request)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        settings = _fallback_settings(request)
        if settings is None:
            return PlainTextResponse(
                f"Internal error: {exc.__class__.__name__}", status_code=500
            )
        message = redact_secrets(str(exc) or exc.__class__.__name__, settings)
        return PlainTextResponse(
            f"Internal error: {message}",
            status_code=500,
            headers=cors_headers(settings),
        )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> Response:
    """Answer unknown paths and methods with a plain-text 404."""
    settings = _fallback_settings(request)
    headers = cors_headers(settings) if settings is not None else None
    if exc.status_code in (404, 405):
        return PlainTextResponse("Page not found", status_code=404, headers=headers)
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=headers)


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="OAuth Relay",
        version="0.1.0",
        description=(
            "Brokers OAuth 2.0 authorization code logins for plugins that "
            "cannot hold the provider's client secret."
        ),
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(api_router)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.middleware("http")(request_boundary)
    return app


app = create_app()

__all__ = ["app", "create_app"]

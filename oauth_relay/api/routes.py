"""
FastAPI routes for the OAuth relay.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from oauth_relay.core.config import AppSettings, ProviderSettings
from oauth_relay.core.errors import ErrorKind, RelayError
from oauth_relay.dependencies import (
    get_app_settings,
    get_correlation_service,
    get_provider_settings,
)
from oauth_relay.schemas import AuthorizeResponse

# Login routes match by prefix; the trailing path converter also matches "".
router = APIRouter()
logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "OAuth relay is up and running!"


def cors_headers(settings: AppSettings) -> dict[str, str]:
    """Headers letting the configured plugin origin read the response."""
    return {"Access-Control-Allow-Origin": settings.provider.plugin_uri}


def redact_secrets(message: str, settings: AppSettings) -> str:
    """Blank out configured secrets in text that is about to leave the relay."""
    for secret in (
        settings.provider.client_secret,
        settings.security.token_encryption_secret,
    ):
        if secret:
            message = message.replace(secret, "[redacted]")
    return message


def error_response(error: RelayError, settings: AppSettings) -> Response:
    """Translate a protocol error into its HTTP response.

    Upstream failure text comes from the provider, so it is redacted like any
    other message.
    """
    if error.kind is ErrorKind.NOT_FOUND:
        return Response(status_code=error.status_code, headers=cors_headers(settings))
    return PlainTextResponse(
        redact_secrets(error.message, settings),
        status_code=error.status_code,
        headers=cors_headers(settings),
    )


@router.get("/", status_code=HTTPStatus.OK, response_class=PlainTextResponse)
async def healthcheck() -> str:
    """Simple health endpoint for monitoring."""
    return HEALTH_MESSAGE


@router.post("/auth/authorize{suffix:path}", status_code=HTTPStatus.OK)
async def start_authorization(
    service: Annotated[Any, Depends(get_correlation_service)],
    provider: Annotated[ProviderSettings, Depends(get_provider_settings)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> Response:
    """
    Start a login: return the provider URL and the handle to poll with.
    """
    started = await service.initiate(provider)
    body = AuthorizeResponse(url=started.url, read_key=started.read_key)
    return JSONResponse(
        content=body.model_dump(by_alias=True),
        headers=cors_headers(settings),
    )


@router.get("/auth/redirect{suffix:path}", status_code=HTTPStatus.OK)
async def handle_provider_redirect(
    service: Annotated[Any, Depends(get_correlation_service)],
    provider: Annotated[ProviderSettings, Depends(get_provider_settings)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    code: Optional[str] = Query(
        default=None, description="Authorization code issued by the provider."
    ),
    state: Optional[str] = Query(
        default=None, description="Write handle issued when the login started."
    ),
) -> Response:
    """Complete the code exchange and show the user a confirmation page."""
    result = await service.complete_callback(provider, code=code, write_key=state)
    if isinstance(result, RelayError):
        return error_response(result, settings)
    return HTMLResponse(content=result, headers=cors_headers(settings))


@router.post("/auth/poll{suffix:path}", status_code=HTTPStatus.OK)
async def poll_tokens(
    service: Annotated[Any, Depends(get_correlation_service)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    read_key: Optional[str] = Query(
        default=None,
        alias="readKey",
        description="Read handle returned by /auth/authorize.",
    ),
) -> Response:
    """Return the token bundle once it is ready; 404 until then."""
    result = await service.poll(read_key)
    if isinstance(result, RelayError):
        return error_response(result, settings)
    return Response(
        content=result,
        media_type="application/json",
        headers=cors_headers(settings),
    )


@router.post("/auth/refresh{suffix:path}", status_code=HTTPStatus.OK)
async def refresh_tokens(
    service: Annotated[Any, Depends(get_correlation_service)],
    provider: Annotated[ProviderSettings, Depends(get_provider_settings)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    code: Optional[str] = Query(default=None, description="Refresh token to exchange."),
) -> Response:
    """Exchange a refresh token for a fresh bundle."""
    result = await service.refresh_tokens(provider, refresh_token=code)
    if isinstance(result, RelayError):
        return error_response(result, settings)
    return Response(
        content=result,
        media_type="application/json",
        headers=cors_headers(settings),
    )


__all__ = ["HEALTH_MESSAGE", "cors_headers", "error_response", "redact_secrets", "router"]

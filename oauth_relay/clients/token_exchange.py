"""
OAuth token endpoint client.

Performs the authorization-code and refresh-token grants against the provider
and hands back the raw upstream outcome so callers can pass it through.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Optional

import httpx


@dataclass(frozen=True)
class ExchangeResponse:
    """Status, reason and body exactly as returned by the token endpoint."""

    status_code: int
    reason: str
    body: str

    @property
    def ok(self) -> bool:
        return self.status_code == HTTPStatus.OK

    def json(self) -> Any:
        """Decode the body as JSON without looking at its contents."""
        return json.loads(self.body)


class TokenExchangeClient:
    """Issue single form-encoded POSTs to a provider token endpoint.

    No retries are attempted and the HTTP client's default timeout applies.
    A transport can be supplied for tests (``httpx.MockTransport``).
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def exchange(self, endpoint: str, form: Dict[str, str]) -> ExchangeResponse:
        """POST ``form`` to ``endpoint`` and return the upstream outcome."""
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(
                endpoint,
                data=form,
                headers={"Accept": "application/json"},
            )

        text = response.text
        reason = text if text else response.reason_phrase
        return ExchangeResponse(
            status_code=response.status_code,
            reason=reason,
            body=text,
        )

    async def exchange_authorization_code(
        self,
        endpoint: str,
        *,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> ExchangeResponse:
        payload = {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "code": code,
        }
        return await self.exchange(endpoint, payload)

    async def refresh_token(
        self,
        endpoint: str,
        *,
        refresh_token: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ) -> ExchangeResponse:
        payload = {
            "grant_type": "refresh_token",
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": redirect_uri,
            "refresh_token": refresh_token,
        }
        return await self.exchange(endpoint, payload)


__all__ = ["ExchangeResponse", "TokenExchangeClient"]

"""
Correlation protocol linking authorization, provider callback and plugin poll.

Two independent handles are issued per login. The ``write`` handle travels
through the provider as the OAuth ``state`` parameter; the ``read`` handle is
only ever returned to the plugin. They are bridged by a ticket record::

    readKey:{writeKey} -> readKey      (ticket TTL, 60s by default)
    tokens:{readKey}   -> bundle JSON  (tokens TTL, 300s by default)

The service keeps no state of its own; everything lives in the injected
key-value store and expires through its TTL.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oauth_relay.clients.kv_store import KeyValueStore
from oauth_relay.clients.token_exchange import ExchangeResponse, TokenExchangeClient
from oauth_relay.core.config import ProviderSettings, RelaySettings
from oauth_relay.core.errors import RelayError
from oauth_relay.core.logging import redact_handle
from oauth_relay.services.confirmation_page import render_confirmation_page
from oauth_relay.services.handles import generate_handle
from oauth_relay.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

TICKET_PREFIX = "readKey:"
TOKENS_PREFIX = "tokens:"


def ticket_key(write_key: str) -> str:
    return f"{TICKET_PREFIX}{write_key}"


def tokens_key(read_key: str) -> str:
    return f"{TOKENS_PREFIX}{read_key}"


@dataclass(frozen=True)
class AuthorizationStart:
    """Result of initiating a login: where to send the user and how to poll."""

    url: str
    read_key: str


def build_authorize_url(provider: ProviderSettings, state: str) -> str:
    """Append the OAuth query parameters to the configured authorize endpoint."""
    parts = urlsplit(str(provider.authorize_endpoint))
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(
        [
            ("client_id", provider.client_id),
            ("redirect_uri", provider.redirect_uri),
            ("scope", provider.scope),
            ("state", state),
        ]
    )
    return urlunsplit(parts._replace(query=urlencode(query)))


class CorrelationService:
    """Runs the four relay operations against a key-value store."""

    def __init__(
        self,
        *,
        store: KeyValueStore,
        exchange_client: TokenExchangeClient,
        relay_settings: RelaySettings,
        token_cipher: Optional[TokenCipherService] = None,
        handle_factory: Callable[[], str] = generate_handle,
        render_confirmation: Callable[[str], str] = render_confirmation_page,
    ) -> None:
        self._store = store
        self._exchange = exchange_client
        self._relay = relay_settings
        self._cipher = token_cipher or TokenCipherService()
        self._new_handle = handle_factory
        self._render_confirmation = render_confirmation

    async def initiate(self, provider: ProviderSettings) -> AuthorizationStart:
        """Issue a read/write handle pair and the provider login URL."""
        read_key = self._new_handle()
        write_key = self._new_handle()

        url = build_authorize_url(provider, state=write_key)
        await self._store.put(
            ticket_key(write_key), read_key, self._relay.ticket_ttl_seconds
        )
        logger.info("Issued correlation ticket state=%s", redact_handle(write_key))
        return AuthorizationStart(url=url, read_key=read_key)

    async def complete_callback(
        self,
        provider: ProviderSettings,
        *,
        code: Optional[str],
        write_key: Optional[str],
    ) -> Union[str, RelayError]:
        """Exchange the authorization code and park the tokens for polling.

        The ticket is looked up before contacting the provider so an unknown
        ``state`` never costs an upstream round trip. The ticket itself is not
        deleted here and lapses through its TTL.
        """
        if not code:
            return RelayError.missing_parameter("Missing authorization code URL param")
        if not write_key:
            return RelayError.missing_parameter("Missing state URL param")

        read_key = await self._store.get(ticket_key(write_key))
        if not read_key:
            logger.warning(
                "Callback for unknown or expired state=%s", redact_handle(write_key)
            )
            return RelayError.unknown_state()

        exchange = await self._exchange.exchange_authorization_code(
            str(provider.token_endpoint),
            code=code,
            client_id=provider.client_id,
            client_secret=provider.client_secret,
            redirect_uri=provider.redirect_uri,
        )
        if not exchange.ok:
            logger.warning(
                "Authorization code exchange rejected with status %s",
                exchange.status_code,
            )
            return RelayError.upstream(exchange.status_code, exchange.reason)

        bundle = _bundle_text(exchange)
        await self._store.put(
            tokens_key(read_key),
            self._cipher.seal(bundle),
            self._relay.tokens_ttl_seconds,
        )
        logger.info("Tokens ready for read handle %s", redact_handle(read_key))
        return self._render_confirmation(self._relay.confirmation_message)

    async def poll(self, read_key: Optional[str]) -> Union[str, RelayError]:
        """Hand over the parked token bundle once, or report it is not there."""
        if not read_key:
            return RelayError.missing_parameter("Missing read key URL param")

        stored = await self._store.take(tokens_key(read_key))
        if stored is None:
            return RelayError.not_found()

        logger.info("Delivered tokens for read handle %s", redact_handle(read_key))
        return self._cipher.unseal(stored)

    async def refresh_tokens(
        self,
        provider: ProviderSettings,
        *,
        refresh_token: Optional[str],
    ) -> Union[str, RelayError]:
        """Trade a refresh token for a new bundle without touching the store."""
        if not refresh_token:
            return RelayError.missing_parameter("Missing refresh token URL param")

        exchange = await self._exchange.refresh_token(
            str(provider.token_endpoint),
            refresh_token=refresh_token,
            client_id=provider.client_id,
            client_secret=provider.client_secret,
            redirect_uri=provider.redirect_uri,
        )
        if not exchange.ok:
            logger.warning("Refresh token exchange rejected with status %s", exchange.status_code)
            return RelayError.upstream(exchange.status_code, exchange.reason)

        return _bundle_text(exchange)


def _bundle_text(exchange: ExchangeResponse) -> str:
    # Parse only to confirm the provider answered with JSON.
    return json.dumps(exchange.json())


__all__ = [
    "AuthorizationStart",
    "CorrelationService",
    "TICKET_PREFIX",
    "TOKENS_PREFIX",
    "build_authorize_url",
    "ticket_key",
    "tokens_key",
]

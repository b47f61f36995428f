"""Symmetric sealing of token bundles while they wait in the store."""

from __future__ import annotations

import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken


class TokenCipherService:
    """Seal and unseal bundle text with a Fernet key derived from a secret.

    Without a secret the service is a passthrough, so the stored value is the
    bundle JSON itself.
    """

    def __init__(self, *, secret: Optional[str] = None) -> None:
        self._fernet: Optional[Fernet] = None
        if secret:
            digest = hashlib.sha256(secret.encode("utf-8")).digest()
            self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def seal(self, plaintext: str) -> str:
        """Return the value to store for ``plaintext``."""
        if self._fernet is None:
            return plaintext
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def unseal(self, stored: str) -> str:
        """Recover the bundle text from a stored value."""
        if self._fernet is None:
            return stored
        try:
            plaintext = self._fernet.decrypt(stored.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to unseal token bundle; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]

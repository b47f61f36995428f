try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from oauth_relay.services.token_cipher import TokenCipherService


def test_seal_and_unseal_with_secret() -> None:
    cipher = TokenCipherService(secret="super-secret-key")
    bundle = '{"access_token": "tok"}'

    sealed = cipher.seal(bundle)
    assert cipher.enabled
    assert sealed != bundle

    assert cipher.unseal(sealed) == bundle


def test_without_secret_values_pass_through() -> None:
    cipher = TokenCipherService(secret=None)

    assert not cipher.enabled
    assert cipher.seal("plain") == "plain"
    assert cipher.unseal("plain") == "plain"


def test_unseal_rejects_foreign_ciphertext() -> None:
    sealed = TokenCipherService(secret="one").seal("payload")

    with pytest.raises(ValueError):
        TokenCipherService(secret="two").unseal(sealed)

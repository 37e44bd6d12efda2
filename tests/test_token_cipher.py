from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from phlink.schemas import TokenSet
from phlink.services.token_cipher import TokenCipherService


def test_encrypt_and_decrypt_round_trip() -> None:
    service = TokenCipherService(secret="super-secret")
    ciphertext = service.encrypt("ph-access-token")

    assert ciphertext != "ph-access-token"
    assert service.decrypt(ciphertext) == "ph-access-token"


def test_decrypt_with_other_secret_fails() -> None:
    ciphertext = TokenCipherService(secret="one").encrypt("ph-access-token")

    with pytest.raises(ValueError):
        TokenCipherService(secret="two").decrypt(ciphertext)


def test_seal_encrypts_both_tokens_and_keeps_expiry() -> None:
    service = TokenCipherService(secret="super-secret")
    tokens = TokenSet(access_token="access", refresh_token="refresh")

    sealed = service.seal(tokens)

    assert service.decrypt(sealed.access_token) == "access"
    assert service.decrypt(sealed.refresh_token) == "refresh"
    assert sealed.expires_at is None
    assert tokens.access_token == "access"


def test_seal_leaves_missing_refresh_token_empty() -> None:
    sealed = TokenCipherService(secret="s").seal(TokenSet(access_token="access"))
    assert sealed.refresh_token is None


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")

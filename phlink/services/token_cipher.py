"""Symmetric encryption for Product Hunt tokens at rest."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from phlink.schemas import TokenSet


class TokenCipherService:
    """Encrypt and decrypt token strings using a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")

    def seal(self, tokens: TokenSet) -> TokenSet:
        """Return a copy of ``tokens`` with both token strings encrypted."""
        refresh_token = tokens.refresh_token
        return tokens.model_copy(
            update={
                "access_token": self.encrypt(tokens.access_token),
                "refresh_token": self.encrypt(refresh_token) if refresh_token else None,
            }
        )


__all__ = ["TokenCipherService"]

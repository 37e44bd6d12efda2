"""Backend-agnostic interface for persisting linked credentials."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from phlink.models.credential import CredentialRecord


class CredentialStore(ABC):
    """Keyed by Telegram id; one credential per identity."""

    @abstractmethod
    def upsert(self, record: CredentialRecord) -> None:
        """Insert ``record`` or replace every field of the existing one.

        Implementations must write in a single atomic operation and keep the
        ``created_at`` of a record that already exists.
        """

    @abstractmethod
    def get(self, external_user_id: str) -> Optional[CredentialRecord]:
        """Return the stored credential for a Telegram id, if any."""

    @abstractmethod
    def list_credentials(self) -> list[CredentialRecord]:
        """Return every stored credential."""

    def close(self) -> None:
        """Release backend resources on shutdown."""


__all__ = ["CredentialStore"]

"""SQLite-backed credential storage."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from phlink.clients.credential_store import CredentialStore
from phlink.core.errors import StorageError
from phlink.models.credential import CredentialRecord

_COLUMNS = (
    "external_user_id",
    "provider_user_id",
    "display_name",
    "username",
    "avatar_url",
    "access_token",
    "refresh_token",
    "expires_at",
    "created_at",
    "updated_at",
)
_COLUMN_LIST = ", ".join(_COLUMNS)
_PLACEHOLDERS = ", ".join("?" for _ in _COLUMNS)
# created_at is kept from the first insert.
_UPSERT_ASSIGNMENTS = ", ".join(
    f"{column} = excluded.{column}"
    for column in _COLUMNS
    if column not in ("external_user_id", "created_at")
)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


class SQLiteCredentialStore(CredentialStore):
    """Credential table keyed by Telegram id.

    A connection is opened per operation, so concurrent requests never share
    one; SQLite serializes the writes. The file and table are created on first
    use.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        self._schema_ready = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if not self._schema_ready:
            self._ensure_schema()
        with self._open() as conn:
            yield conn

    @contextmanager
    def _open(self) -> Iterator[sqlite3.Connection]:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Cannot create credential database directory: {exc}"
            ) from exc
        try:
            conn = sqlite3.connect(self._db_path, timeout=10.0)
            conn.row_factory = sqlite3.Row
            try:
                with conn:
                    yield conn
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StorageError(f"SQLite credential store failed: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self._open() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS credentials (
                    external_user_id TEXT PRIMARY KEY,
                    provider_user_id TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    username TEXT NOT NULL,
                    avatar_url TEXT,
                    access_token TEXT NOT NULL,
                    refresh_token TEXT,
                    expires_at TIMESTAMP,
                    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
        self._schema_ready = True

    def upsert(self, record: CredentialRecord) -> None:
        values = (
            record.external_user_id,
            record.provider_user_id,
            record.display_name,
            record.username,
            record.avatar_url,
            record.access_token,
            record.refresh_token,
            _isoformat(record.expires_at),
            _isoformat(record.created_at),
            _isoformat(record.updated_at),
        )
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO credentials ({_COLUMN_LIST})
                VALUES ({_PLACEHOLDERS})
                ON CONFLICT(external_user_id) DO UPDATE SET {_UPSERT_ASSIGNMENTS}
                """,
                values,
            )

    def get(self, external_user_id: str) -> Optional[CredentialRecord]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMN_LIST} FROM credentials WHERE external_user_id = ?",
                (external_user_id,),
            ).fetchone()
        if not row:
            return None
        return CredentialRecord.model_validate(dict(row))

    def list_credentials(self) -> list[CredentialRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMN_LIST} FROM credentials ORDER BY created_at"
            ).fetchall()
        return [CredentialRecord.model_validate(dict(row)) for row in rows]


__all__ = ["SQLiteCredentialStore"]

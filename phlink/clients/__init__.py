"""Expose constructed client wrappers."""

from .credential_store import CredentialStore
from .dynamodb import DynamoDBCredentialStore
from .producthunt import ProductHuntClient
from .sqlite_store import SQLiteCredentialStore
from .telegram import TelegramNotifier

__all__ = [
    "CredentialStore",
    "DynamoDBCredentialStore",
    "ProductHuntClient",
    "SQLiteCredentialStore",
    "TelegramNotifier",
]

"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Clients are built lazily and cached per process. None of them performs I/O
when constructed, so a request can be validated before anything reaches the
network or disk.
"""

import logging
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from phlink.clients import (
    CredentialStore,
    DynamoDBCredentialStore,
    ProductHuntClient,
    SQLiteCredentialStore,
    TelegramNotifier,
)
from phlink.core.config import get_settings
from phlink.services import AccountLinkingService, TokenCipherService

logger = logging.getLogger(__name__)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_producthunt_client() -> ProductHuntClient:
    """Provide the Product Hunt OAuth client."""
    settings = _settings()
    return ProductHuntClient(
        settings.producthunt, timeout=settings.http_timeout_seconds
    )


@lru_cache()
def get_telegram_notifier() -> TelegramNotifier:
    """Provide the Telegram notification client."""
    settings = _settings()
    return TelegramNotifier(settings.telegram, timeout=settings.http_timeout_seconds)


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the configured credential store."""
    storage = _settings().storage
    if storage.backend == "dynamodb":
        logger.info("Using DynamoDB credential store (%s).", storage.dynamodb_table_name)
        return DynamoDBCredentialStore(storage)
    logger.info("Using SQLite credential store (%s).", storage.sqlite_path)
    return SQLiteCredentialStore(storage.sqlite_path or "data/tokens.db")


def close_credential_store() -> None:
    """Release the credential store if one was created."""
    if get_credential_store.cache_info().currsize:
        get_credential_store().close()
        get_credential_store.cache_clear()


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide the token cipher when an encryption secret is configured."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


def get_account_linking_service(
    oauth_client: Annotated[ProductHuntClient, Depends(get_producthunt_client)],
    notifier: Annotated[TelegramNotifier, Depends(get_telegram_notifier)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    token_cipher: Annotated[
        Optional[TokenCipherService], Depends(get_token_cipher_service)
    ],
) -> AccountLinkingService:
    """Build the callback pipeline from the shared clients."""
    return AccountLinkingService(
        oauth_client=oauth_client,
        notifier=notifier,
        store=store,
        token_cipher=token_cipher,
    )


__all__ = [
    "close_credential_store",
    "get_account_linking_service",
    "get_credential_store",
    "get_producthunt_client",
    "get_telegram_notifier",
    "get_token_cipher_service",
]

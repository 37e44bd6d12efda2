"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    close_credential_store,
    get_account_linking_service,
    get_credential_store,
    get_producthunt_client,
    get_telegram_notifier,
    get_token_cipher_service,
)
from .config import get_app_settings

__all__ = [
    "close_credential_store",
    "get_account_linking_service",
    "get_app_settings",
    "get_credential_store",
    "get_producthunt_client",
    "get_telegram_notifier",
    "get_token_cipher_service",
]

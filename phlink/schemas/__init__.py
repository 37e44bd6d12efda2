"""Public schema exports."""

from .auth import CallbackRequest, ProviderProfile, TokenSet

__all__ = [
    "CallbackRequest",
    "ProviderProfile",
    "TokenSet",
]

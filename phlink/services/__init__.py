"""Service layer exports."""

from .account_linking import AccountLinkingService, LinkResult, LinkStage
from .callback_validation import decode_state, encode_state, validate_callback_request
from .token_cipher import TokenCipherService

__all__ = [
    "AccountLinkingService",
    "LinkResult",
    "LinkStage",
    "TokenCipherService",
    "decode_state",
    "encode_state",
    "validate_callback_request",
]

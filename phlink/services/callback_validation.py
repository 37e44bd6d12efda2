"""
Validation of the Product Hunt OAuth redirect.

The ``state`` value doubles as the carrier of the Telegram identity: it is
``"<telegram id>_<nonce>"``. Decoding returns a tagged result instead of raising
so callers decide how a rejected state is reported.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from phlink.core.config import AppSettings
from phlink.core.errors import InvalidState, MissingConfiguration, MissingParameter
from phlink.schemas import CallbackRequest

STATE_DELIMITER = "_"

_IDENTITY_PATTERN = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class DecodedState:
    external_user_id: str
    nonce: str


@dataclass(frozen=True)
class StateRejected:
    reason: str


StateDecodeResult = Union[DecodedState, StateRejected]


def decode_state(state: str) -> StateDecodeResult:
    """Split ``state`` at the first delimiter into identity and nonce."""
    identity, delimiter, nonce = state.partition(STATE_DELIMITER)
    if not delimiter:
        return StateRejected("expected '<telegram id>_<nonce>'")
    if not identity:
        return StateRejected("telegram id segment is empty")
    if not _IDENTITY_PATTERN.fullmatch(identity):
        return StateRejected("telegram id segment is not numeric")
    if not nonce:
        return StateRejected("nonce segment is empty")
    return DecodedState(external_user_id=identity, nonce=nonce)


def encode_state(external_user_id: str, nonce: Optional[str] = None) -> str:
    """Build a state value that ``decode_state`` maps back to ``external_user_id``."""
    if not _IDENTITY_PATTERN.fullmatch(external_user_id):
        raise InvalidState("telegram id must be numeric")
    return f"{external_user_id}{STATE_DELIMITER}{nonce or uuid.uuid4().hex}"


def validate_callback_request(
    params: Mapping[str, str], settings: AppSettings
) -> CallbackRequest:
    """Validate query parameters and configuration before any network call.

    Raises ``MissingParameter`` when ``code`` or ``state`` is absent,
    ``InvalidState`` when the state does not carry a Telegram id, and
    ``MissingConfiguration`` naming every required setting that is unset.
    """
    code = (params.get("code") or "").strip()
    state = (params.get("state") or "").strip()

    missing = [name for name, value in (("code", code), ("state", state)) if not value]
    if missing:
        raise MissingParameter(*missing)

    decoded = decode_state(state)
    if isinstance(decoded, StateRejected):
        raise InvalidState(decoded.reason)

    missing_config = settings.missing_configuration()
    if missing_config:
        raise MissingConfiguration(missing_config)

    return CallbackRequest(
        code=code,
        state=state,
        external_user_id=decoded.external_user_id,
        nonce=decoded.nonce,
    )


__all__ = [
    "DecodedState",
    "STATE_DELIMITER",
    "StateDecodeResult",
    "StateRejected",
    "decode_state",
    "encode_state",
    "validate_callback_request",
]

"""
Error taxonomy for the account-linking pipeline.

Each error knows the HTTP status it maps to and how to render itself as the
JSON body returned to the browser that followed the OAuth redirect.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Iterable


class AccountLinkError(Exception):
    """Base class for failures that end a callback with an error response."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    kind: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class MissingParameter(AccountLinkError):
    """The redirect did not carry ``code`` or ``state``."""

    status_code = HTTPStatus.BAD_REQUEST
    kind = "missing_parameter"

    def __init__(self, *names: str) -> None:
        self.parameters = tuple(names)
        super().__init__(f"Missing required parameters: {', '.join(names)}")


class InvalidState(AccountLinkError):
    """The ``state`` value does not decode to a Telegram identity."""

    status_code = HTTPStatus.BAD_REQUEST
    kind = "invalid_state"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid state parameter: {reason}")


class MissingConfiguration(AccountLinkError):
    """Deployment is missing required settings."""

    kind = "missing_configuration"

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__("Missing environment variables")

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "missing": self.missing}


class UpstreamError(AccountLinkError):
    """Product Hunt failed or answered with something unusable."""

    kind = "upstream_error"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.details is not None:
            payload["details"] = self.details
        return payload


class StorageError(AccountLinkError):
    """The credential could not be written or read."""

    kind = "storage_error"


class NotifyError(AccountLinkError):
    """Telegram did not accept the notification.

    Never rendered to the caller: the pipeline logs it and still reports
    success, because the credential is already stored.
    """

    kind = "notify_error"

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


__all__ = [
    "AccountLinkError",
    "InvalidState",
    "MissingConfiguration",
    "MissingParameter",
    "NotifyError",
    "StorageError",
    "UpstreamError",
]

"""
Domain model for a linked Product Hunt credential.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialRecord(BaseModel):
    """One Telegram identity's Product Hunt credential.

    ``external_user_id`` is the Telegram id decoded from the OAuth state and is
    unrelated to ``provider_user_id``. Re-linking replaces the whole record;
    stores keep the original ``created_at``.
    """

    external_user_id: str = Field(..., pattern=r"^-?[0-9]+$")
    provider_user_id: str
    display_name: str
    username: str
    avatar_url: Optional[str] = None
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def public_view(self) -> Dict[str, Any]:
        """Serialize without tokens, for listing linked accounts."""
        data = self.model_dump(
            mode="json", exclude={"access_token", "refresh_token"}
        )
        data["has_refresh_token"] = self.refresh_token is not None
        return data


__all__ = ["CredentialRecord"]

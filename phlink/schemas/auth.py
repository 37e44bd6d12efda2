"""Schemas describing one pass through the Product Hunt OAuth callback."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CallbackRequest(BaseModel):
    """A validated redirect from the Product Hunt consent screen."""

    code: str = Field(..., description="Single-use authorization code.")
    state: str = Field(..., description="Raw state value echoed back by Product Hunt.")
    external_user_id: str = Field(
        ..., description="Telegram identity decoded from the state value."
    )
    nonce: str = Field(..., description="Random suffix of the state value.")


class TokenSet(BaseModel):
    """Tokens minted by the Product Hunt token endpoint."""

    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = Field(
        None, description="Absent when Product Hunt does not report a lifetime."
    )


class ProviderProfile(BaseModel):
    """The Product Hunt account that authorized the application."""

    provider_user_id: str
    display_name: str
    username: str
    avatar_url: Optional[str] = None


__all__ = ["CallbackRequest", "ProviderProfile", "TokenSet"]

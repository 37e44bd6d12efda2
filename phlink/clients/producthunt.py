"""
Product Hunt OAuth utilities.

Builds the consent URL, exchanges authorization codes and reads the profile of
the account that granted access. Every call is a single attempt: codes are
single-use, so replaying a request after a partial success can only fail.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from phlink.core.config import ProductHuntSettings
from phlink.core.errors import UpstreamError
from phlink.schemas import ProviderProfile, TokenSet
from phlink.schemas.producthunt import VIEWER_QUERY, ProductHuntViewerResponse


def _response_body(response: httpx.Response) -> Any:
    """Return the decoded JSON body, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _lifetime_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class ProductHuntClient:
    """Talk to the Product Hunt OAuth and GraphQL endpoints."""

    AUTH_BASE_URL = "https://api.producthunt.com/v2/oauth/authorize"
    TOKEN_URL = "https://api.producthunt.com/v2/oauth/token"
    GRAPHQL_URL = "https://api.producthunt.com/v2/api/graphql"

    def __init__(
        self,
        settings: ProductHuntSettings,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def build_authorization_url(self, state: str) -> str:
        """Construct the Product Hunt consent URL."""
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._settings.scopes),
            "state": state,
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> TokenSet:
        """Exchange an authorization code for a token set."""
        payload = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self._settings.redirect_uri,
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Product Hunt token request failed: {exc.__class__.__name__}"
            ) from exc

        body = _response_body(response)
        if not response.is_success:
            raise UpstreamError("Failed to exchange authorization code", details=body)
        if not isinstance(body, dict):
            raise UpstreamError(
                "Unexpected token response from Product Hunt", details=body
            )

        # Product Hunt can answer 200 with an error document instead of tokens.
        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise UpstreamError(
                "No access token received from Product Hunt", details=body
            )

        expires_at = None
        lifetime = _lifetime_seconds(body.get("expires_in"))
        if lifetime is not None:
            try:
                expires_at = datetime.now(timezone.utc) + timedelta(seconds=lifetime)
            except (OverflowError, ValueError) as exc:
                raise UpstreamError(
                    "Unexpected token lifetime from Product Hunt", details=body
                ) from exc

        return TokenSet(
            access_token=access_token,
            refresh_token=body.get("refresh_token") or None,
            expires_at=expires_at,
        )

    async def fetch_profile(self, access_token: str) -> ProviderProfile:
        """Read ``viewer.user`` for the account behind ``access_token``."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    self.GRAPHQL_URL,
                    json={"query": VIEWER_QUERY},
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Product Hunt profile request failed: {exc.__class__.__name__}"
            ) from exc

        body = _response_body(response)
        if not response.is_success:
            raise UpstreamError("Failed to fetch Product Hunt profile", details=body)
        if isinstance(body, dict) and body.get("errors"):
            raise UpstreamError(
                "Product Hunt profile query returned errors", details=body
            )

        try:
            parsed = ProductHuntViewerResponse.model_validate(body)
        except ValidationError as exc:
            missing = sorted(
                {".".join(str(part) for part in error["loc"]) for error in exc.errors()}
            )
            raise UpstreamError(
                "Malformed profile response",
                details={"missing": missing, "payload": body},
            ) from exc

        user = parsed.data.viewer.user
        return ProviderProfile(
            provider_user_id=user.id,
            display_name=user.name or user.username,
            username=user.username,
            avatar_url=user.profile_image,
        )


__all__ = ["ProductHuntClient"]

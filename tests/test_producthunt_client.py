from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from phlink.clients.producthunt import ProductHuntClient
from phlink.core.config import ProductHuntSettings
from phlink.core.errors import UpstreamError

pytestmark = pytest.mark.anyio


def _settings() -> ProductHuntSettings:
    return ProductHuntSettings(
        PRODUCTHUNT_CLIENT_ID="client",
        PRODUCTHUNT_CLIENT_SECRET="secret",
        PRODUCTHUNT_REDIRECT_URI="https://example.com/callback",
    )


def _client(handler) -> ProductHuntClient:
    return ProductHuntClient(_settings(), transport=httpx.MockTransport(handler))


def _viewer(**user) -> dict:
    return {"data": {"viewer": {"user": user}}}


async def test_exchange_posts_authorization_code_form() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "access_token": "access-1",
                "refresh_token": "refresh-1",
                "expires_in": 7200,
            },
        )

    before = datetime.now(timezone.utc)
    tokens = await _client(handler).exchange_authorization_code("code-1")

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == ProductHuntClient.TOKEN_URL
    form = parse_qs(request.content.decode("utf-8"))
    assert form == {
        "client_id": ["client"],
        "client_secret": ["secret"],
        "code": ["code-1"],
        "grant_type": ["authorization_code"],
        "redirect_uri": ["https://example.com/callback"],
    }
    assert tokens.access_token == "access-1"
    assert tokens.refresh_token == "refresh-1"
    assert tokens.expires_at is not None
    assert before + timedelta(seconds=7190) <= tokens.expires_at
    assert tokens.expires_at <= datetime.now(timezone.utc) + timedelta(seconds=7200)


@pytest.mark.parametrize("expires_in", [None, "3600", True])
async def test_exchange_leaves_expiry_empty_without_numeric_lifetime(expires_in) -> None:
    body = {"access_token": "access-1"}
    if expires_in is not None:
        body["expires_in"] = expires_in

    tokens = await _client(lambda request: httpx.Response(200, json=body)).exchange_authorization_code(
        "code-1"
    )

    assert tokens.expires_at is None
    assert tokens.refresh_token is None


async def test_exchange_rejects_success_status_without_access_token() -> None:
    body = {"error": "invalid_grant", "error_description": "code already used"}

    with pytest.raises(UpstreamError) as excinfo:
        await _client(lambda request: httpx.Response(200, json=body)).exchange_authorization_code(
            "code-1"
        )

    assert "No access token" in excinfo.value.message
    assert excinfo.value.details == body


async def test_exchange_surfaces_provider_error_payload() -> None:
    body = {"error": "invalid_client"}

    with pytest.raises(UpstreamError) as excinfo:
        await _client(lambda request: httpx.Response(401, json=body)).exchange_authorization_code(
            "code-1"
        )

    assert excinfo.value.details == body
    assert excinfo.value.to_payload()["details"] == body


async def test_exchange_keeps_non_json_error_bodies() -> None:
    with pytest.raises(UpstreamError) as excinfo:
        await _client(
            lambda request: httpx.Response(502, text="Bad gateway")
        ).exchange_authorization_code("code-1")

    assert excinfo.value.details == "Bad gateway"


async def test_exchange_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as excinfo:
        await _client(handler).exchange_authorization_code("code-1")

    assert "ConnectError" in excinfo.value.message


async def test_fetch_profile_reads_viewer_user() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=_viewer(
                id="7",
                name="Ann",
                username="ann",
                profileImage="https://ph-avatars.example/ann.png",
            ),
        )

    profile = await _client(handler).fetch_profile("access-1")

    request = seen[0]
    assert str(request.url) == ProductHuntClient.GRAPHQL_URL
    assert request.headers["authorization"] == "Bearer access-1"
    assert "viewer" in json.loads(request.content)["query"]
    assert profile.provider_user_id == "7"
    assert profile.display_name == "Ann"
    assert profile.username == "ann"
    assert profile.avatar_url == "https://ph-avatars.example/ann.png"


async def test_fetch_profile_falls_back_to_username_for_display_name() -> None:
    profile = await _client(
        lambda request: httpx.Response(200, json=_viewer(id=7, name=None, username="ann"))
    ).fetch_profile("access-1")

    assert profile.provider_user_id == "7"
    assert profile.display_name == "ann"
    assert profile.avatar_url is None


@pytest.mark.parametrize(
    "body, missing_field",
    [
        ({"data": {"viewer": None}}, "data.viewer"),
        ({"data": {"viewer": {"id": "7", "username": "ann"}}}, "data.viewer.user"),
        (_viewer(id="7", name="Ann"), "data.viewer.user.username"),
        ({}, "data"),
    ],
)
async def test_fetch_profile_names_missing_fields(body, missing_field) -> None:
    with pytest.raises(UpstreamError) as excinfo:
        await _client(lambda request: httpx.Response(200, json=body)).fetch_profile(
            "access-1"
        )

    assert excinfo.value.message == "Malformed profile response"
    assert missing_field in excinfo.value.details["missing"]
    assert excinfo.value.details["payload"] == body


async def test_fetch_profile_rejects_graphql_errors() -> None:
    body = {"errors": [{"message": "Invalid token"}], "data": None}

    with pytest.raises(UpstreamError) as excinfo:
        await _client(lambda request: httpx.Response(200, json=body)).fetch_profile(
            "access-1"
        )

    assert excinfo.value.details == body


async def test_fetch_profile_rejects_error_status() -> None:
    with pytest.raises(UpstreamError) as excinfo:
        await _client(
            lambda request: httpx.Response(401, json={"error": "unauthorized"})
        ).fetch_profile("access-1")

    assert excinfo.value.details == {"error": "unauthorized"}


def test_authorization_url_carries_state_and_client() -> None:
    url = ProductHuntClient(_settings()).build_authorization_url(state="42_nonce")

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert url.startswith(ProductHuntClient.AUTH_BASE_URL)
    assert query["state"] == ["42_nonce"]
    assert query["client_id"] == ["client"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["https://example.com/callback"]
    assert query["scope"] == ["public private"]


async def test_exchange_rejects_out_of_range_lifetime() -> None:
    body = {"access_token": "access-1", "expires_in": 10**12}

    with pytest.raises(UpstreamError) as excinfo:
        await _client(
            lambda request: httpx.Response(200, json=body)
        ).exchange_authorization_code("code-1")

    assert excinfo.value.message == "Unexpected token lifetime from Product Hunt"
    assert excinfo.value.details == body

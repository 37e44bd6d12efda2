"""
FastAPI routes for linking Product Hunt accounts to Telegram chats.
"""

from __future__ import annotations

import hmac
import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from phlink.api.pages import render_success_page
from phlink.core.errors import MissingConfiguration, MissingParameter
from phlink.dependencies import (
    get_account_linking_service,
    get_app_settings,
    get_credential_store,
    get_producthunt_client,
)
from phlink.services import AccountLinkingService, encode_state

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/producthunt/authorize", status_code=HTTPStatus.OK)
async def start_producthunt_oauth_flow(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_producthunt_client)],
    settings: Annotated[Any, Depends(get_app_settings)],
    telegram_id: str | None = Query(
        default=None, description="Telegram chat that should receive the link."
    ),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Product Hunt consent screen.",
    ),
) -> Any:
    """Build the consent URL whose state carries the Telegram identity."""
    telegram_id = (telegram_id or "").strip()
    if not telegram_id:
        raise MissingParameter("telegram_id")
    missing = settings.missing_configuration()
    if missing:
        raise MissingConfiguration(missing)

    state = encode_state(telegram_id)
    authorization_url = oauth_client.build_authorization_url(state=state)

    wants_html = "text/html" in request.headers.get("accept", "").lower()
    if redirect or wants_html:
        return RedirectResponse(
            url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
    return {"authorization_url": authorization_url, "state": state}


@router.get("/auth/producthunt/callback", response_class=HTMLResponse)
async def handle_producthunt_callback(
    request: Request,
    service: Annotated[AccountLinkingService, Depends(get_account_linking_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> Response:
    """Complete the OAuth exchange, store the credential and notify Telegram.

    Failures surface as ``AccountLinkError`` subclasses and are rendered as
    JSON by the application-level exception handler.
    """
    result = await service.link_account(request.query_params, settings)
    return HTMLResponse(
        content=render_success_page(result.profile), status_code=HTTPStatus.OK
    )


@router.get("/users", status_code=HTTPStatus.OK)
async def list_linked_accounts(
    store: Annotated[Any, Depends(get_credential_store)],
    settings: Annotated[Any, Depends(get_app_settings)],
    x_admin_token: str | None = Header(default=None),
) -> dict:
    """List linked accounts without their tokens."""
    expected_token = settings.admin_api_token
    if not expected_token:
        raise HTTPException(
            status_code=HTTPStatus.FORBIDDEN, detail="Account listing is disabled."
        )
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode("utf-8"), expected_token.encode("utf-8")
    ):
        raise HTTPException(status_code=HTTPStatus.FORBIDDEN, detail="Invalid token")

    records = store.list_credentials()
    return {
        "users": [record.public_view() for record in records],
        "count": len(records),
    }

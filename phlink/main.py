"""
FastAPI application entrypoint for the Product Hunt account linking service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from phlink.api.routes import router as api_router
from phlink.core.config import get_settings
from phlink.core.errors import AccountLinkError
from phlink.core.logging import configure_logging
from phlink.dependencies import close_credential_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report configuration gaps at startup and release the store on shutdown."""
    missing = get_settings().missing_configuration()
    if missing:
        logger.warning(
            "Callbacks will fail until these settings are provided: %s",
            ", ".join(missing),
        )
    yield
    close_credential_store()
    logger.info("Credential store released.")


async def handle_account_link_error(
    request: Request, exc: AccountLinkError
) -> JSONResponse:
    """Log the failure with full context and render its JSON body."""
    payload = exc.to_payload()
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed (%s): %s details=%s",
            request.method,
            request.url.path,
            exc.kind,
            exc.message,
            payload.get("details") or payload.get("missing"),
            exc_info=exc,
        )
    else:
        logger.warning(
            "%s %s rejected (%s): %s",
            request.method,
            request.url.path,
            exc.kind,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=payload)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render failures outside the link taxonomy as a JSON 500."""
    logger.error(
        "%s %s failed with unexpected %s",
        request.method,
        request.url.path,
        exc.__class__.__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Product Hunt Telegram Link",
        version="0.1.0",
        description="Links Product Hunt accounts to Telegram chats via OAuth.",
        lifespan=lifespan,
    )
    app.add_exception_handler(AccountLinkError, handle_account_link_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]

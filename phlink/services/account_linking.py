"""
Link a Product Hunt account to a Telegram identity.

One callback runs four stages in order: validate the redirect, exchange the
code, fetch the profile, then persist and notify. Everything up to and
including persistence is fatal on failure; the Telegram notification is not,
because by then the credential is stored and the browser still gets the
success page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Mapping, Optional

from phlink.clients import CredentialStore, ProductHuntClient, TelegramNotifier
from phlink.core.config import AppSettings
from phlink.core.errors import AccountLinkError, NotifyError
from phlink.models.credential import CredentialRecord
from phlink.schemas import ProviderProfile, TokenSet
from phlink.services.callback_validation import validate_callback_request
from phlink.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class LinkStage(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    TOKEN_EXCHANGED = "token_exchanged"
    PROFILE_FETCHED = "profile_fetched"
    PERSISTED = "persisted"
    NOTIFIED = "notified"
    NOTIFY_FAILED = "notify_failed"


@dataclass(frozen=True)
class LinkResult:
    external_user_id: str
    profile: ProviderProfile
    stage: LinkStage

    @property
    def notified(self) -> bool:
        return self.stage is LinkStage.NOTIFIED


def build_link_message(profile: ProviderProfile) -> str:
    """Telegram message (HTML parse mode) confirming the linked account."""
    return (
        "✅ Authorization successful!\n\n"
        f"Welcome, {escape(profile.display_name)}!\n"
        "Your Product Hunt account is now connected.\n"
        f"Username: @{escape(profile.username)}"
    )


class AccountLinkingService:
    """Run the Product Hunt callback pipeline for one request."""

    def __init__(
        self,
        *,
        oauth_client: ProductHuntClient,
        notifier: TelegramNotifier,
        store: CredentialStore,
        token_cipher: Optional[TokenCipherService] = None,
    ) -> None:
        self._oauth = oauth_client
        self._notifier = notifier
        self._store = store
        self._cipher = token_cipher

    async def link_account(
        self, params: Mapping[str, str], settings: AppSettings
    ) -> LinkResult:
        stage = LinkStage.RECEIVED
        try:
            request = validate_callback_request(params, settings)
            stage = LinkStage.VALIDATED
            logger.info(
                "Product Hunt callback validated for telegram_id=%s",
                request.external_user_id,
            )

            tokens = await self._oauth.exchange_authorization_code(request.code)
            stage = LinkStage.TOKEN_EXCHANGED
            logger.info(
                "Authorization code exchanged for telegram_id=%s (expires_at=%s)",
                request.external_user_id,
                tokens.expires_at.isoformat() if tokens.expires_at else "n/a",
            )

            profile = await self._oauth.fetch_profile(tokens.access_token)
            stage = LinkStage.PROFILE_FETCHED
            logger.info(
                "Fetched Product Hunt profile user_id=%s for telegram_id=%s",
                profile.provider_user_id,
                request.external_user_id,
            )

            self._persist(request.external_user_id, tokens, profile)
            stage = LinkStage.PERSISTED
        except AccountLinkError as exc:
            logger.warning(
                "Product Hunt link failed after stage %s: %s", stage.value, exc.kind
            )
            raise

        stage = await self._notify(request.external_user_id, profile)
        return LinkResult(
            external_user_id=request.external_user_id, profile=profile, stage=stage
        )

    def _persist(
        self, external_user_id: str, tokens: TokenSet, profile: ProviderProfile
    ) -> None:
        if self._cipher is not None:
            tokens = self._cipher.seal(tokens)
        record = CredentialRecord(
            external_user_id=external_user_id,
            provider_user_id=profile.provider_user_id,
            display_name=profile.display_name,
            username=profile.username,
            avatar_url=profile.avatar_url,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )
        self._store.upsert(record)
        logger.info("Stored Product Hunt credential for telegram_id=%s", external_user_id)

    async def _notify(self, external_user_id: str, profile: ProviderProfile) -> LinkStage:
        try:
            await self._notifier.send_message(
                external_user_id, build_link_message(profile)
            )
        except NotifyError as exc:
            logger.warning(
                "Telegram notification failed for telegram_id=%s: %s (%s)",
                external_user_id,
                exc.message,
                exc.details,
            )
            return LinkStage.NOTIFY_FAILED
        except Exception:  # pylint: disable=broad-except
            logger.exception(
                "Unexpected error notifying telegram_id=%s", external_user_id
            )
            return LinkStage.NOTIFY_FAILED

        logger.info("Telegram notification sent to telegram_id=%s", external_user_id)
        return LinkStage.NOTIFIED


__all__ = [
    "AccountLinkingService",
    "LinkResult",
    "LinkStage",
    "build_link_message",
]

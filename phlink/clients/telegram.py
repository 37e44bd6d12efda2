"""Telegram Bot API client used to tell a chat its account was linked."""

from __future__ import annotations

import httpx

from phlink.core.config import TelegramSettings
from phlink.core.errors import NotifyError

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramNotifier:
    """Send one-off messages to a Telegram chat."""

    def __init__(
        self,
        settings: TelegramSettings,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    async def send_message(
        self, chat_id: str, text: str, *, parse_mode: str = "HTML"
    ) -> None:
        """Deliver ``text`` to ``chat_id`` or raise ``NotifyError``."""
        bot_token = self._settings.bot_token
        if not bot_token:
            raise NotifyError("Telegram bot token is not configured.")

        # The token is part of the URL; never put the URL into errors or logs.
        url = f"{TELEGRAM_API_BASE}/bot{bot_token}/sendMessage"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url,
                    json={"chat_id": chat_id, "text": text, "parse_mode": parse_mode},
                )
        except httpx.HTTPError as exc:
            raise NotifyError(
                f"Telegram sendMessage failed: {exc.__class__.__name__}"
            ) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        if not response.is_success or not payload.get("ok"):
            raise NotifyError(
                "Telegram rejected the notification.",
                details=payload.get("description") or response.status_code,
            )


__all__ = ["TELEGRAM_API_BASE", "TelegramNotifier"]

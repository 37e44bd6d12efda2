"""
Logging utilities for the account-linking API.
"""

import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a consistent format.

    HTTP client libraries log full request URLs, and the Telegram Bot API puts
    the bot token in the URL path, so they are held at WARNING.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]

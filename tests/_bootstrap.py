"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


_DEFAULT_ENV_VARS: dict[str, str] = {
    "PRODUCTHUNT_CLIENT_ID": "test-client-id",
    "PRODUCTHUNT_CLIENT_SECRET": "test-client-secret",
    "PRODUCTHUNT_REDIRECT_URI": "https://example.com/api/auth/producthunt/callback",
    "TELEGRAM_BOT_TOKEN": "123456:test-bot-token",
    "CREDENTIAL_DB_PATH": os.path.join(tempfile.gettempdir(), "phlink-test-tokens.db"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)

"""
Application configuration models and helpers.

Every provider, channel and storage key is optional at load time so the API can
start without them and report exactly which ones are missing when a callback
arrives (see ``AppSettings.missing_configuration``).
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import AnyHttpUrl, Field, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()

_HTTP_URL = TypeAdapter(AnyHttpUrl)


class _SettingsGroup(BaseSettings):
    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )


class ProductHuntSettings(_SettingsGroup):
    """Credentials of the Product Hunt OAuth application."""

    client_id: Optional[str] = Field(None, validation_alias="PRODUCTHUNT_CLIENT_ID")
    client_secret: Optional[str] = Field(
        None, validation_alias="PRODUCTHUNT_CLIENT_SECRET"
    )
    redirect_uri: Optional[str] = Field(
        None,
        validation_alias="PRODUCTHUNT_REDIRECT_URI",
        description="Sent verbatim; must match the URI registered with Product Hunt.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("public", "private"),
        validation_alias="PRODUCTHUNT_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())

    @field_validator("redirect_uri")
    @classmethod
    def _check_redirect_uri(cls, value: Optional[str]) -> Optional[str]:
        """Require an http(s) URL without normalizing the configured text."""
        if value is None:
            return value
        value = value.strip()
        if not value:
            return None
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"redirect URI must be an http(s) URL: {value}") from exc
        return value


class TelegramSettings(_SettingsGroup):
    """Bot credentials used to notify linked chats."""

    bot_token: Optional[str] = Field(None, validation_alias="TELEGRAM_BOT_TOKEN")


class StorageSettings(_SettingsGroup):
    """Where linked credentials are persisted."""

    backend: Literal["sqlite", "dynamodb"] = Field(
        "sqlite", validation_alias="CREDENTIAL_STORE_BACKEND"
    )
    sqlite_path: Optional[str] = Field(
        "data/tokens.db", validation_alias="CREDENTIAL_DB_PATH"
    )
    dynamodb_table_name: Optional[str] = Field(
        None, validation_alias="DYNAMODB_TABLE_NAME"
    )
    region_name: Optional[str] = Field("us-east-1", validation_alias="AWS_REGION")

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return value.strip().lower() if isinstance(value, str) else value

    def required_values(self) -> dict[str, Optional[str]]:
        """Return the env keys the selected backend cannot run without."""
        if self.backend == "dynamodb":
            return {
                "DYNAMODB_TABLE_NAME": self.dynamodb_table_name,
                "AWS_REGION": self.region_name,
            }
        return {"CREDENTIAL_DB_PATH": self.sqlite_path}


class SecuritySettings(_SettingsGroup):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "When set, stored access and refresh tokens are encrypted with a key "
            "derived from this secret."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    http_timeout_seconds: float = Field(10.0, validation_alias="HTTP_TIMEOUT_SECONDS")
    admin_api_token: Optional[str] = Field(
        None,
        validation_alias="ADMIN_API_TOKEN",
        description="Enables the linked-account listing endpoint when set.",
    )
    producthunt: ProductHuntSettings = Field(default_factory=ProductHuntSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    def missing_configuration(self) -> list[str]:
        """List every required env key that has no value, in a stable order."""
        required: dict[str, object] = {
            "PRODUCTHUNT_CLIENT_ID": self.producthunt.client_id,
            "PRODUCTHUNT_CLIENT_SECRET": self.producthunt.client_secret,
            "PRODUCTHUNT_REDIRECT_URI": self.producthunt.redirect_uri,
            "TELEGRAM_BOT_TOKEN": self.telegram.bot_token,
        }
        required.update(self.storage.required_values())
        return [key for key, value in required.items() if not value]


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "ProductHuntSettings",
    "SecuritySettings",
    "StorageSettings",
    "TelegramSettings",
    "get_settings",
]

"""
FastAPI dependency for injecting application settings.

Routes receive settings through this dependency rather than calling
``get_settings`` so tests can substitute a partially configured copy.
"""

from phlink.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning the process-wide settings."""
    return get_settings()


__all__ = ["get_app_settings"]

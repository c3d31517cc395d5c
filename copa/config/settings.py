"""Configuration settings for copa with caching utilities."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """copa runtime settings"""

    model_config = SettingsConfigDict(
        env_prefix="COPA_",
        env_file=[".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"
    log_format: str = "console"

    # Token accounting (tiktoken model name)
    token_model: str = "gpt-4"

    # Global exclude patterns: the ``ignore:`` line of this file plus ``ignore``
    config_path: Path = Field(default_factory=lambda: Path.home() / ".copa")
    ignore: str = ""

    # Nested ``:eval`` templates
    max_eval_depth: int = Field(default=16, ge=1)

    # Web placeholders
    web_timeout_seconds: float = Field(default=30.0, gt=0)
    web_connect_timeout_seconds: float = Field(default=10.0, gt=0)
    web_max_content_bytes: int = Field(default=2_000_000, ge=1)
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


_SETTINGS_LOCK = RLock()
_SETTINGS_CACHE: Settings | None = None


def get_settings(*, refresh: bool = False) -> Settings:
    """Return a cached ``Settings`` instance.

    Parameters
    ----------
    refresh:
        When ``True`` the cached instance is discarded and a new one is created.
    """

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        if refresh or _SETTINGS_CACHE is None:
            _SETTINGS_CACHE = Settings()
        return _SETTINGS_CACHE


def clear_settings_cache() -> None:
    """Clear the cached settings instance."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = None


get_settings.cache_clear = clear_settings_cache  # type: ignore[attr-defined]


@contextmanager
def override_settings(**overrides: Any) -> Iterator[Settings]:
    """Temporarily override the cached settings within a context."""

    global _SETTINGS_CACHE

    with _SETTINGS_LOCK:
        previous_settings = _SETTINGS_CACHE

    base_settings = previous_settings or Settings()
    patched_settings = base_settings.model_copy(update=overrides)

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE = patched_settings

    try:
        yield patched_settings
    finally:
        with _SETTINGS_LOCK:
            _SETTINGS_CACHE = previous_settings

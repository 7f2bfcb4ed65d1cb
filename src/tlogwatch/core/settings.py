"""
Central configuration for tlogwatch.

This module provides a single, typed configuration object that reads from
environment variables (12-factor style) using Pydantic BaseSettings.

Usage:

    from tlogwatch.core.settings import get_settings

    settings = get_settings()
    client = HTTPLogClient(settings.server_url, timeout=settings.timeout)

Command line flags override these values for a single run.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tlogwatch.state.store import default_state_path
from tlogwatch.transport.http import DEFAULT_TIMEOUT

DEFAULT_SERVER_URL = "https://rekor.sigstore.dev"


class TlogwatchSettings(BaseSettings):
    """
    Root configuration object for tlogwatch.

    Every field maps to TLOGWATCH_<FIELD>.
    """

    model_config = SettingsConfigDict(env_prefix="TLOGWATCH_")

    server_url: str = Field(
        default=DEFAULT_SERVER_URL,
        description="Base URL of the transparency log server.",
    )
    state_file: Path = Field(
        default_factory=default_state_path,
        description="Where the last trusted tree state is kept.",
    )
    public_key_file: Optional[Path] = Field(
        default=None,
        description="PEM/DER log public key to pin. Unset: trust the key the log advertises.",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        description="Seconds to wait for the log server.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG/INFO/WARNING/ERROR).",
    )

    @field_validator("server_url")
    @classmethod
    def _validate_server_url(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("TLOGWATCH_SERVER_URL must be an http(s) URL")
        return v

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("TLOGWATCH_TIMEOUT must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"TLOGWATCH_LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> TlogwatchSettings:
    """
    Cached accessor for TlogwatchSettings.

    Usage:
        from tlogwatch.core.settings import get_settings
        settings = get_settings()
    """
    return TlogwatchSettings()

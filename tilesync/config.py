"""
Settings - Environment-driven configuration.

Variables:
    TILESYNC_ENV            development / production
    TILESYNC_LOG_LEVEL      falls back to LOG_LEVEL, then INFO
    LOG_FORMAT              json (default) or text
    ALLOWED_ORIGINS         comma separated CORS origins
    TILESYNC_SEED           fixed shuffle seed for new games
    TILESYNC_INIT_TIMEOUT   seconds to wait for engine construction
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping
import os


@dataclass
class Settings:
    """Runtime settings for the API, CLI and controllers."""
    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    seed: int | None = None
    init_timeout: float | None = None

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        level = env.get("TILESYNC_LOG_LEVEL") or env.get("LOG_LEVEL") or "INFO"
        origins = [
            origin.strip()
            for origin in env.get("ALLOWED_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        return cls(
            env=env.get("TILESYNC_ENV", "development"),
            log_level=level.upper(),
            log_format=env.get("LOG_FORMAT", "json").lower(),
            allowed_origins=origins or ["*"],
            seed=_optional_int(env.get("TILESYNC_SEED")),
            init_timeout=_optional_float(env.get("TILESYNC_INIT_TIMEOUT")),
        )


def _optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)

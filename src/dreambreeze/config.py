"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Runtime configuration for a DreamBreeze sleep session.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``DREAMBREEZE_`` namespace (stripped automatically by *pydantic-settings*).
    """

    model_config = SettingsConfigDict(
        env_prefix="DREAMBREEZE_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ── Arbitration controller ────────────────────────────────
    controller_cycle_interval_seconds: float = 30.0
    fan_max_step: int = 5  # max fan-speed change per cycle

    # ── Posture classifier ────────────────────────────────────
    posture_window_size: int = 50
    posture_min_samples: int = 5
    posture_hysteresis_ms: int = 10_000

    # ── Motion pipeline ───────────────────────────────────────
    pipeline_max_queue: int = 10_000


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()

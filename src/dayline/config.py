# src/dayline/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DAYLINE"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Switches ----
    persist: bool
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_path: Path

    # ---- Rendering ----
    timeline_width: int

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "dayline").strip() or "dayline"
        # Console log level; INFO and below would interleave with the REPL output.
        log_level = _env(_k("LOG_LEVEL"), "WARNING")

        persist = _env_bool(_k("PERSIST"), True)
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/dayline"))
        store_path = _env_path(_k("STORE_PATH"), data_dir / "dayline.sqlite3")

        timeline_width = max(8, _env_int(_k("TIMELINE_WIDTH"), 48))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            persist=persist,
            console_enabled=console_enabled,
            data_dir=data_dir,
            store_path=store_path,
            timeline_width=timeline_width,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS

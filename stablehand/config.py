from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    app_title: str = "Stablehand"
    log_level: str = "INFO"
    # Populate the in-memory stores with a few horses, users and events
    seed_demo_data: bool = False


def _flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(dotenv_path: str | None = None) -> Settings:
    # dotenv_path allows overriding in tests; real env vars win over .env
    load_dotenv(dotenv_path=dotenv_path, override=False)

    log_level = os.getenv("STABLEHAND_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise RuntimeError(f"Invalid STABLEHAND_LOG_LEVEL value: {log_level!r}")

    return Settings(
        app_title=os.getenv("STABLEHAND_APP_TITLE", "Stablehand"),
        log_level=log_level,
        seed_demo_data=_flag(os.getenv("STABLEHAND_SEED_DEMO_DATA", "0")),
    )

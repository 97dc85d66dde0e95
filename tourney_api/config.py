# tourney_api/config.py
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_flag(name: str, default: bool = False) -> bool:
    return _get_env(name, "1" if default else "0") == "1"


# -------------------------
# Persistence
# -------------------------
# Whole tournament is stored as one JSON document under a single key
TOURNEY_STATE_PATH: str = _get_env("TOURNEY_STATE_PATH", "data/tournament.json")
TOURNEY_STATE_KEY: str = _get_env("TOURNEY_STATE_KEY", "cricket_tournament_data")


# -------------------------
# Match flow
# -------------------------
# 0 = operator confirms the innings switch / match result manually
TOURNEY_AUTO_SWITCH_INNINGS: bool = _get_env_flag("TOURNEY_AUTO_SWITCH_INNINGS")
TOURNEY_AUTO_COMPLETE_MATCH: bool = _get_env_flag("TOURNEY_AUTO_COMPLETE_MATCH")

TOURNEY_DEFAULT_OVERS: int = _get_env_int("TOURNEY_DEFAULT_OVERS", 5)


# -------------------------
# Logging
# -------------------------
TOURNEY_LOG_LEVEL: str = _get_env("TOURNEY_LOG_LEVEL", "INFO").upper()


def validate_config() -> None:
    if not TOURNEY_STATE_PATH:
        raise RuntimeError("TOURNEY_STATE_PATH must be non-empty")

    if not TOURNEY_STATE_KEY:
        raise RuntimeError("TOURNEY_STATE_KEY must be non-empty")

    if TOURNEY_DEFAULT_OVERS <= 0:
        raise RuntimeError("TOURNEY_DEFAULT_OVERS must be positive")

    if TOURNEY_LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise RuntimeError(f"TOURNEY_LOG_LEVEL is not a valid level: {TOURNEY_LOG_LEVEL}")

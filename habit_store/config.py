"""
Central configuration loader.
Reads from environment variables (via .env); falls back to repo-local defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Load .env from repo root (if present)
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env")


def _get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    val = os.getenv(key, default)
    if required and not val:
        raise EnvironmentError(f"Missing required environment variable: {key}")
    return val


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
def get_log_level() -> str:
    return _get("HABIT_LOG_LEVEL", default="INFO").upper()  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
def get_repo_root() -> Path:
    return _REPO_ROOT


def get_db_path() -> Path:
    override = _get("HABIT_DB_PATH")
    if override:
        return Path(override).expanduser()
    return _REPO_ROOT / "data" / "habits.db"

"""Environment-driven settings for tagnotes."""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_DB_PATH = Path.home() / ".tagnotes" / "tagnotes.db"
DEFAULT_STORAGE_KEY = "notes"


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Read a boolean flag; unrecognised values fall back to the default."""
    value = os.getenv(key, "").strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


@dataclass(frozen=True)
class Settings:
    db_path: Path
    storage_key: str = DEFAULT_STORAGE_KEY
    # write [] when the last note is deleted instead of leaving the old blob
    persist_empty: bool = True
    log_level: str = "WARNING"


def load_settings() -> Settings:
    # read on every call so a changed TAGNOTES_DB_PATH is picked up (tests)
    env_path = get_env("TAGNOTES_DB_PATH")
    return Settings(
        db_path=Path(env_path) if env_path else DEFAULT_DB_PATH,
        storage_key=get_env("TAGNOTES_STORAGE_KEY") or DEFAULT_STORAGE_KEY,
        persist_empty=get_env_bool("TAGNOTES_PERSIST_EMPTY", True),
        log_level=get_env("TAGNOTES_LOG_LEVEL") or "WARNING",
    )


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once; later calls are ignored by basicConfig."""
    name = (level or load_settings().log_level).upper()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, name, logging.WARNING),
    )

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


def _default_db_path() -> str:
    return str(Path.home() / ".local" / "share" / "pinmarks" / "bookmarks.sqlite")


@dataclass
class Settings:
    # Storage
    db_path: str = ""
    export_dir: str = "."

    # Views
    recent_window_days: int = 7
    recent_limit: int = 10
    recent_display_limit: int = 5

    # Suggestions
    suggestion_limit: int = 6
    top_categories: int = 3
    regen_delay_s: float = 1.0

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False
    log_file: str = ""

    def __post_init__(self) -> None:
        if not self.db_path:
            self.db_path = _default_db_path()

    @property
    def recent_window_ms(self) -> int:
        return self.recent_window_days * 24 * 60 * 60 * 1000

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.db_path = _env_str("PINMARKS_DB", s.db_path)
        s.export_dir = _env_str("PINMARKS_EXPORT_DIR", s.export_dir)

        s.recent_window_days = _env_int("PINMARKS_RECENT_WINDOW_DAYS", s.recent_window_days)
        s.recent_limit = _env_int("PINMARKS_RECENT_LIMIT", s.recent_limit)
        s.recent_display_limit = _env_int("PINMARKS_RECENT_DISPLAY_LIMIT", s.recent_display_limit)

        s.suggestion_limit = _env_int("PINMARKS_SUGGESTION_LIMIT", s.suggestion_limit)
        s.top_categories = _env_int("PINMARKS_TOP_CATEGORIES", s.top_categories)
        s.regen_delay_s = _env_float("PINMARKS_REGEN_DELAY_S", s.regen_delay_s)

        s.log_level = _env_str("PINMARKS_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("PINMARKS_NO_COLOR", s.no_color)
        s.log_file = _env_str("PINMARKS_LOG_FILE", s.log_file)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
        return s


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()

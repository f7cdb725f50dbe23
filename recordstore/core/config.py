"""
Configuration helpers for recordstore.

Repositories, routers and scripts read settings through ``get_settings`` so
that nothing fetches os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    log_level: str
    json_indent: int | None


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    indent = _int(os.getenv("RECORDSTORE_JSON_INDENT", "2"), 2)
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(os.getenv("RECORDSTORE_DATA_DIR") or "./data"),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        json_indent=indent if indent > 0 else None,
    )

"""
Runtime Settings
================

Environment-driven settings for the server and the export pipeline.
"""

import os
import logging
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    """Settings read from SLIDECANVAS_* environment variables."""
    export_dir: Path = Path("exports")
    font_dir: Optional[Path] = None
    storage_url: Optional[str] = None
    log_level: str = "INFO"
    http_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "Settings":
        font_dir = os.getenv("SLIDECANVAS_FONT_DIR")
        return cls(
            export_dir=Path(os.getenv("SLIDECANVAS_EXPORT_DIR", "exports")),
            font_dir=Path(font_dir) if font_dir else None,
            storage_url=os.getenv("SLIDECANVAS_STORAGE_URL") or None,
            log_level=os.getenv("SLIDECANVAS_LOG_LEVEL", "INFO").upper(),
            http_timeout=float(os.getenv("SLIDECANVAS_HTTP_TIMEOUT", "30")),
        )


# Singleton instance
_settings = None


def get_settings() -> Settings:
    """Get singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(f"[SETTINGS] Loaded: export_dir={_settings.export_dir}, storage={'on' if _settings.storage_url else 'off'}")
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None

"""
Centralized settings and path configuration for the quote engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


PACKAGE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Node-type price table ("translation key")
    pricing_table: Path

    # Review queue storage
    review_queue: Path

    # Upload limits
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        pricing_table = os.environ.get('WORKFLOW_QUOTE_PRICING_TABLE')
        review_queue = os.environ.get('WORKFLOW_QUOTE_REVIEW_QUEUE')
        max_upload = os.environ.get('WORKFLOW_QUOTE_MAX_UPLOAD_BYTES')

        return cls(
            project_root=root,
            pricing_table=Path(pricing_table) if pricing_table else PACKAGE_DIR / 'data' / 'translation_key.json',
            review_queue=Path(review_queue) if review_queue else root / 'data' / 'review_queue.json',
            max_upload_bytes=int(max_upload) if max_upload else DEFAULT_MAX_UPLOAD_BYTES,
            log_level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None

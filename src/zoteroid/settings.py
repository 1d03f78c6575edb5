"""Configuration helpers for Zoteroid."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_LITERATURE_ROOT = "Literature"
DEFAULT_OVERVIEW_PATH = "Literature Overview.md"
SETTINGS_RELATIVE_PATH = Path(".zoteroid") / "settings.json"
PERSISTED_FIELDS = {"literature_root", "overview_path"}

logger = structlog.get_logger(__name__)


class Settings(BaseModel):
    """Runtime configuration loaded from env vars and the vault settings file."""

    vault_dir: Path = Field(default_factory=Path.cwd)
    literature_root: str = DEFAULT_LITERATURE_ROOT
    overview_path: str = DEFAULT_OVERVIEW_PATH
    crossref_base_url: str = "https://api.crossref.org/works"
    contact_email: str | None = None
    http_timeout: float = 30.0
    log_level: str = "INFO"

    @property
    def settings_path(self) -> Path:
        return self.vault_dir / SETTINGS_RELATIVE_PATH

    @property
    def user_agent(self) -> str:
        if self.contact_email:
            return f"zoteroid/0.1 (mailto:{self.contact_email})"
        return "zoteroid/0.1"

    def ensure_directories(self) -> None:
        """Create the vault directory if it is missing."""
        self.vault_dir.mkdir(parents=True, exist_ok=True)

    def update(self, **changes: str | None) -> "Settings":
        """Apply user edits to the persisted fields and save them."""
        unknown = set(changes) - PERSISTED_FIELDS
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        cleaned = {key: value.strip() for key, value in changes.items() if value is not None}
        updated = self.model_copy(update=cleaned)
        SettingsStore(updated.settings_path).save(updated)
        return updated

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        vault_dir = Path(os.environ.get("ZOTEROID_VAULT_DIR", Path.cwd()))
        base = cls(
            vault_dir=vault_dir,
            crossref_base_url=os.environ.get(
                "ZOTEROID_CROSSREF_URL", "https://api.crossref.org/works"
            ),
            contact_email=os.environ.get("ZOTEROID_CONTACT_EMAIL"),
            http_timeout=float(os.environ.get("ZOTEROID_HTTP_TIMEOUT", "30")),
            log_level=os.environ.get("ZOTEROID_LOG_LEVEL", "INFO"),
        )
        stored = SettingsStore(base.settings_path).load()
        return base.model_copy(update=stored)


class SettingsStore:
    """JSON file holding the user-editable vault settings."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        """Return persisted values merged over the defaults."""
        values: dict[str, Any] = {
            "literature_root": DEFAULT_LITERATURE_ROOT,
            "overview_path": DEFAULT_OVERVIEW_PATH,
        }
        if not self._path.exists():
            return values
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("settings.load_failed", path=str(self._path), error=str(exc))
            return values
        if not isinstance(payload, dict):
            logger.warning("settings.load_failed", path=str(self._path), error="not an object")
            return values
        for key in PERSISTED_FIELDS:
            if isinstance(payload.get(key), str):
                values[key] = payload[key]
        return values

    def save(self, settings: Settings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = settings.model_dump(include=PERSISTED_FIELDS)
        self._path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        logger.info("settings.saved", path=str(self._path))


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    return structlog.PrintLogger(sys.stderr)


def configure_logging(level: str) -> None:
    """Filter structlog output below the configured level."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=_stderr_logger,
    )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    settings = Settings.load()
    settings.ensure_directories()
    return settings

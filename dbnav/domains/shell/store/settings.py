"""Settings store for managing application settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from dbnav.shared.core.store import CONFIG_DIR, read_json, write_json

logger = logging.getLogger(__name__)


def _resolve_settings_path() -> Path:
    override = os.environ.get("DBNAV_SETTINGS_PATH", "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_DIR / "settings.json"


class SettingsStore:
    """Application settings as one JSON object in ~/.dbnav/settings.json."""

    def __init__(self, file_path: Path | None = None) -> None:
        self.file_path = file_path or _resolve_settings_path()

    def load_all(self) -> dict[str, Any]:
        """Load all settings.

        Returns:
            Dictionary of settings, or empty dict if none exist.
        """
        data = read_json(self.file_path)
        return data if isinstance(data, dict) else {}

    def save_all(self, settings: dict[str, Any]) -> None:
        write_json(self.file_path, settings)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        settings = self.load_all()
        settings[key] = value
        self.save_all(settings)


def _at_least(minimum: int) -> dict[str, int]:
    return {"minimum": minimum}


@dataclass(frozen=True)
class ViewerSettings:
    """Grid and explorer tuning read from settings.json.

    Integer values below a field's ``minimum`` fall back to the default.
    """

    max_pinned_rows: int = 5
    prefetch_threshold: int = 50
    page_size: int = field(default=100, metadata=_at_least(1))
    row_cache_capacity: int = field(default=1000, metadata=_at_least(1))
    column_min_width: int = field(default=10, metadata=_at_least(1))
    column_max_width: int = field(default=50, metadata=_at_least(1))
    vim_motion_timeout_ms: int = field(default=1500, metadata=_at_least(1))
    show_line_numbers: bool = True
    relative_numbers: bool = False

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> ViewerSettings:
        """Build from a settings dict, keeping defaults for missing or invalid values."""
        values: dict[str, Any] = {}
        for setting_field in fields(cls):
            if setting_field.name not in settings:
                continue
            raw = settings[setting_field.name]
            if isinstance(setting_field.default, bool):
                if isinstance(raw, bool):
                    values[setting_field.name] = raw
                    continue
            elif isinstance(raw, int) and not isinstance(raw, bool):
                if raw >= setting_field.metadata.get("minimum", 0):
                    values[setting_field.name] = raw
                    continue
            logger.warning("Ignoring invalid setting %s=%r", setting_field.name, raw)

        result = cls(**values)
        if result.column_min_width > result.column_max_width:
            logger.warning("Inconsistent grid settings, using defaults")
            return cls()
        return result

    @classmethod
    def load(cls, store: SettingsStore | None = None) -> ViewerSettings:
        return cls.from_settings((store or SettingsStore()).load_all())

    @property
    def vim_motion_timeout_s(self) -> float:
        return self.vim_motion_timeout_ms / 1000

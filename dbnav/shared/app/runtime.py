"""Process-level configuration read from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dbnav.shared.core.store import CONFIG_DIR


@dataclass(frozen=True)
class RuntimeConfig:
    debug: bool = False
    log_path: Path | None = None
    settings_path: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RuntimeConfig:
        env = os.environ if environ is None else environ
        debug = env.get("DBNAV_DEBUG", "") == "1"
        log_value = env.get("DBNAV_LOG_PATH", "").strip()
        settings_value = env.get("DBNAV_SETTINGS_PATH", "").strip()
        log_path = Path(log_value).expanduser() if log_value else None
        if log_path is None and debug:
            log_path = CONFIG_DIR / "dbnav.log"
        return cls(
            debug=debug,
            log_path=log_path,
            settings_path=Path(settings_value).expanduser() if settings_value else None,
        )

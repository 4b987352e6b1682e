"""JSON files kept under the dbnav config directory."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Tests point this at a temporary directory before importing dbnav.
CONFIG_DIR = Path(os.environ.get("DBNAV_CONFIG_DIR", Path.home() / ".dbnav"))


def read_json(path: Path) -> Any:
    """Parsed contents of path, or None when it is missing or unreadable."""
    try:
        text = path.read_text(encoding="utf-8")
        return json.loads(text)
    except FileNotFoundError:
        return None
    except ValueError:
        logger.warning("Ignoring unreadable store file %s", path)
        return None


def write_json(path: Path, data: Any) -> None:
    """Replace path with data in a single rename. The file is owner-only."""
    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp_", suffix=".json")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2)
        tmp_path.chmod(0o600)
        tmp_path.replace(path)
    except Exception:
        tmp_path.unlink(missing_ok=True)
        raise

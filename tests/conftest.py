"""Pytest configuration for dbnav tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

# Keep settings written by tests out of the real config dir. Must run before
# dbnav.shared.core.store is imported.
_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="dbnav-test-config-"))
os.environ.setdefault("DBNAV_CONFIG_DIR", str(_TEST_CONFIG_DIR))
os.environ.pop("DBNAV_SETTINGS_PATH", None)
os.environ.pop("DBNAV_DEBUG", None)
os.environ.pop("DBNAV_LOG_PATH", None)

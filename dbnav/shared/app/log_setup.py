"""Logging configuration.

The terminal belongs to the UI, so log records never go to stderr: they are
written to a file when one is configured and dropped otherwise.
"""

from __future__ import annotations

import logging

from .runtime import RuntimeConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def configure_logging(runtime: RuntimeConfig) -> logging.Handler:
    """Attach a single handler to the ``dbnav`` logger (idempotent)."""
    global _handler
    package_logger = logging.getLogger("dbnav")
    if _handler is not None:
        package_logger.removeHandler(_handler)
        _handler.close()

    handler: logging.Handler
    if runtime.log_path is not None:
        runtime.log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(runtime.log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()

    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if runtime.debug else logging.INFO)
    package_logger.propagate = False
    _handler = handler
    return handler

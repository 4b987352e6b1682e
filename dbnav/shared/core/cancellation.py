"""Cancellation handles passed from the UI loop to background work."""

from __future__ import annotations

import threading
from itertools import count

from .errors import QueryCancelledError

_token_ids = count(1)


class CancelToken:
    """Thread-safe, one-way cancellation flag.

    The UI loop creates one token per background query and hands it to the
    data loader. Loaders poll ``is_cancelled`` (or call
    ``raise_if_cancelled``) between blocking steps. Each token has a unique
    ``token_id`` so completions can be matched to the request that spawned
    them.
    """

    def __init__(self) -> None:
        self.token_id = next(_token_ids)
        self._event = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise QueryCancelledError("query cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or timeout elapses; returns the flag."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        state = "cancelled" if self.is_cancelled else "active"
        return f"CancelToken(id={self.token_id}, {state})"

"""Tests for query cancellation tokens."""

from __future__ import annotations

import threading

import pytest

from dbnav.shared.core.cancellation import CancelToken
from dbnav.shared.core.errors import QueryCancelledError


class TestCancelToken:
    def test_unique_ids(self):
        assert CancelToken().token_id != CancelToken().token_id

    def test_cancel_is_one_way(self):
        token = CancelToken()
        assert not token.is_cancelled
        token.raise_if_cancelled()
        token.cancel()
        token.cancel()
        assert token.is_cancelled
        with pytest.raises(QueryCancelledError):
            token.raise_if_cancelled()

    def test_wait_wakes_on_cancel(self):
        """A waiting worker thread sees the cancellation."""
        token = CancelToken()
        seen = []
        worker = threading.Thread(target=lambda: seen.append(token.wait(5)))
        worker.start()
        token.cancel()
        worker.join(5)
        assert seen == [True]

    def test_wait_times_out(self):
        assert CancelToken().wait(0.01) is False

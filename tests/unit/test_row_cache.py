"""Tests for the rendered-row LRU cache."""

from __future__ import annotations

import pytest

from dbnav.domains.results.domain.row_cache import RowCache


class TestRowCache:
    def test_get_missing(self):
        """Unknown offsets read as None."""
        assert RowCache(2).get(0) is None

    def test_evicts_least_recently_inserted(self):
        """Inserting past capacity drops the oldest entry."""
        cache = RowCache(3)
        for offset in range(4):
            cache.set(offset, [str(offset)])
        assert len(cache) == 3
        assert 0 not in cache
        assert cache.get(3) == ["3"]

    def test_get_promotes(self):
        """A read entry survives the next eviction."""
        cache = RowCache(2)
        cache.set(0, ["a"])
        cache.set(1, ["b"])
        assert cache.get(0) == ["a"]
        cache.set(2, ["c"])
        assert 0 in cache
        assert 1 not in cache

    def test_overwrite_does_not_grow(self):
        """Setting an existing offset replaces its value in place."""
        cache = RowCache(2)
        cache.set(0, ["a"])
        cache.set(0, ["z"])
        assert len(cache) == 1
        assert cache.get(0) == ["z"]

    def test_clear(self):
        cache = RowCache(2)
        cache.set(0, ["a"])
        cache.clear()
        assert len(cache) == 0

    def test_capacity_must_be_positive(self):
        """A zero capacity is rejected."""
        with pytest.raises(ValueError):
            RowCache(0)

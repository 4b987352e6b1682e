"""Exception types shared across the explorer, grid and query layers."""

from __future__ import annotations


class DbnavError(Exception):
    """Base class for all dbnav errors."""


class ConnectivityError(DbnavError):
    """The data source is unreachable or the connection was lost."""


class RemoteQueryError(DbnavError):
    """The data source rejected a query (syntax, permissions, missing object)."""


class QueryCancelledError(DbnavError):
    """A query was cancelled before it produced a result.

    Never shown to the user.
    """


class GridCapacityError(DbnavError):
    """A grid operation would exceed a configured limit."""


class PinLimitError(GridCapacityError):
    def __init__(self, limit: int):
        super().__init__(f"maximum pinned rows ({limit}) reached")
        self.limit = limit


class InvalidRowError(GridCapacityError):
    def __init__(self, row: int):
        super().__init__("invalid row index")
        self.row = row

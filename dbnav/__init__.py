"""dbnav - a terminal browser for database catalogs and table data."""

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "DbnavApp",
    "MockDataLoader",
    "DataLoaderProtocol",
]

if TYPE_CHECKING:
    from dbnav.domains.shell.app.main import DbnavApp
    from dbnav.mocks import MockDataLoader
    from dbnav.shared.core.protocols import DataLoaderProtocol


def __getattr__(name: str) -> Any:
    """Lazy import for heavy modules to keep package import side-effect free."""
    if name == "DbnavApp":
        from dbnav.domains.shell.app.main import DbnavApp

        return DbnavApp
    if name == "MockDataLoader":
        from dbnav.mocks import MockDataLoader

        return MockDataLoader
    if name == "DataLoaderProtocol":
        from dbnav.shared.core.protocols import DataLoaderProtocol

        return DataLoaderProtocol
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

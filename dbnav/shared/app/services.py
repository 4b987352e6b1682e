"""Service container and builders for dbnav."""

from __future__ import annotations

from dataclasses import dataclass

from dbnav.domains.shell.store.settings import SettingsStore, ViewerSettings
from dbnav.shared.app.runtime import RuntimeConfig
from dbnav.shared.core.protocols import DataLoaderProtocol


@dataclass
class AppServices:
    """Collaborators the app is built with; tests swap individual fields."""

    loader: DataLoaderProtocol
    runtime: RuntimeConfig
    settings_store: SettingsStore
    viewer: ViewerSettings


def build_app_services(
    loader: DataLoaderProtocol,
    *,
    runtime: RuntimeConfig | None = None,
    settings_store: SettingsStore | None = None,
) -> AppServices:
    runtime = runtime or RuntimeConfig.from_env()
    if settings_store is None:
        settings_store = SettingsStore(runtime.settings_path)
    return AppServices(
        loader=loader,
        runtime=runtime,
        settings_store=settings_store,
        viewer=ViewerSettings.load(settings_store),
    )

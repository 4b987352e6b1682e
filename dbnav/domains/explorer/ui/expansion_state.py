"""Persist and restore which explorer nodes are expanded."""

from __future__ import annotations

import logging

from dbnav.domains.explorer.domain.tree import NavigationTree
from dbnav.shared.ui.protocols import AppProtocol

logger = logging.getLogger(__name__)

SETTINGS_KEY = "expanded_nodes"


def expanded_node_ids(tree: NavigationTree) -> list[str]:
    """Ids of expanded nodes in display order."""
    return [node.id for node in tree.flatten() if node.expanded]


def save_expanded_state(host: AppProtocol) -> None:
    tree = host._tree
    if tree is None:
        return
    try:
        host.services.settings_store.set(SETTINGS_KEY, expanded_node_ids(tree))
    except OSError as error:
        logger.warning("Could not save explorer state: %s", error)


def load_expanded_state(host: AppProtocol) -> list[str]:
    saved = host.services.settings_store.get(SETTINGS_KEY, [])
    if not isinstance(saved, list):
        return []
    return [node_id for node_id in saved if isinstance(node_id, str)]


def next_pending_expansion(tree: NavigationTree, pending: list[str]) -> str | None:
    """Expand queued nodes that are ready; return the first that needs a load.

    Saved ids are restored parent-first. A node that is already loaded is
    simply expanded; the first one that still has to fetch children is
    returned (and removed from the queue) so the caller can request it.
    Ids not in the tree yet stay queued; once none of the queued ids can be
    found the queue is dropped.
    """
    while pending:
        node = None
        for index, node_id in enumerate(pending):
            candidate = tree.find_by_id(node_id)
            if candidate is not None:
                node = candidate
                del pending[index]
                break
        if node is None:
            pending.clear()
            return None
        if node.loaded:
            if node.children:
                node.expanded = True
            continue
        node.expanded = True
        return node.id
    return None

"""Pure path helpers over a dialog map's id-indexed node arena.

Single-branch walks always follow ``children[0]``: a node with several
children exposes only its first (oldest) branch as the default
continuation. Other branches are reached by selecting a node on them.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from .errors import DanglingNode
from .types import DialogMap

logger = logging.getLogger(__name__)


def ancestors(tree: DialogMap, node_id: str, *, strict: bool = False) -> List[str]:
    """Return the ids from the root down to ``node_id`` (inclusive).

    A parent id that is missing from the tree ends the walk. By default the
    partial path collected so far is returned; ``strict=True`` raises
    :class:`DanglingNode` instead.
    """
    path: List[str] = []
    visited: Set[str] = set()
    current_id: Optional[str] = node_id

    while current_id is not None:
        node = tree.nodes.get(current_id)
        if node is None:
            if current_id == node_id:
                return []
            partial = list(reversed(path))
            logger.warning("Ancestor walk from %s hit missing parent %s", node_id, current_id)
            if strict:
                raise DanglingNode(node_id, current_id, partial)
            return partial
        if current_id in visited:
            logger.warning("Cycle detected at node %s while walking ancestors of %s", current_id, node_id)
            break
        visited.add(current_id)
        path.append(current_id)
        current_id = node.parent_id

    path.reverse()
    return path


def primary_descendants(tree: DialogMap, node_id: str) -> List[str]:
    path: List[str] = []
    visited: Set[str] = set()
    current_id: Optional[str] = node_id

    while current_id is not None:
        node = tree.nodes.get(current_id)
        if node is None:
            break
        if current_id in visited:
            logger.warning("Cycle detected at node %s while walking descendants of %s", current_id, node_id)
            break
        visited.add(current_id)
        path.append(current_id)
        current_id = node.children[0] if node.children else None

    return path


def full_path(tree: DialogMap, node_id: str) -> List[str]:
    path = ancestors(tree, node_id)
    node = tree.nodes.get(node_id)
    if node is not None and node.children:
        for descendant_id in primary_descendants(tree, node.children[0]):
            if descendant_id not in path:
                path.append(descendant_id)
    return path


def node_depth(tree: DialogMap, node_id: str) -> int:
    depth = 0
    visited: Set[str] = {node_id}
    node = tree.nodes.get(node_id)
    while node is not None and node.parent_id:
        if node.parent_id in visited:
            logger.warning("Cycle detected at node %s while measuring depth of %s", node.parent_id, node_id)
            break
        visited.add(node.parent_id)
        depth += 1
        node = tree.nodes.get(node.parent_id)
    return depth


def resolve_optimal_path(tree: DialogMap, candidate_ids: Iterable[str]) -> List[str]:
    """Rebuild a linear path around the deepest of ``candidate_ids``.

    Ids that are no longer in the tree are ignored. Ties on depth go to the
    candidate seen first. Returns an empty list when no candidate exists.
    """
    deepest_id: Optional[str] = None
    max_depth = -1
    for candidate_id in candidate_ids:
        if candidate_id not in tree.nodes:
            continue
        depth = node_depth(tree, candidate_id)
        if depth > max_depth:
            max_depth = depth
            deepest_id = candidate_id

    if deepest_id is None:
        return []
    return full_path(tree, deepest_id)

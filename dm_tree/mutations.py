"""Structural edits on a dialog map: path selection, branch grafting and subtree deletion."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

from .errors import CannotDeleteRoot, NodeNotFound, ParentNotFound
from .paths import primary_descendants
from .types import ChatMessage, DialogMap, DialogMapNode

logger = logging.getLogger(__name__)


def apply_selection(tree: DialogMap, path: Sequence[str]) -> None:
    selected = set(path)
    tree.selected_path = list(path)
    for node_id, node in tree.nodes.items():
        node.is_selected = node_id in selected


def set_selected_path(tree: DialogMap, path: Sequence[str]) -> DialogMap:
    # Unknown ids are kept in the path; they simply never match a node.
    apply_selection(tree, path)
    tree.touch()
    return tree


def build_default_path(tree: DialogMap) -> List[str]:
    return primary_descendants(tree, tree.root_node_id)


def append_child_chain(
    tree: DialogMap,
    parent_node_id: str,
    messages: Sequence[ChatMessage],
) -> List[DialogMapNode]:
    """Graft a linear run of messages under ``parent_node_id``.

    The attachment point only moves onto newly created user nodes, so an
    assistant reply hangs under the user turn before it while consecutive
    user turns nest under one another.
    """
    if parent_node_id not in tree.nodes:
        raise NodeNotFound(parent_node_id, "branch point")

    created: List[DialogMapNode] = []
    current_parent_id = parent_node_id
    for message in messages:
        node = DialogMapNode.from_message(message, current_parent_id)
        tree.nodes[current_parent_id].children.append(node.id)
        tree.nodes[node.id] = node
        created.append(node)
        if message.role == "user":
            current_parent_id = node.id

    if created:
        tree.touch()
    logger.debug("Appended %d nodes under %s", len(created), parent_node_id)
    return created


def _collect_subtree(tree: DialogMap, roots: Sequence[str]) -> Set[str]:
    collected: Set[str] = set()
    stack = list(roots)
    while stack:
        node_id = stack.pop()
        if node_id in collected:
            continue
        collected.add(node_id)
        node = tree.nodes.get(node_id)
        if node is not None:
            stack.extend(node.children)
    return collected


def _deletion_roots(tree: DialogMap, node: DialogMapNode, parent: DialogMapNode) -> List[str]:
    # A user turn and its single assistant reply are shown as one card and go together.
    roots = [node.id]
    if node.role == "user" and len(node.children) == 1:
        child = tree.nodes.get(node.children[0])
        if child is not None and child.role == "assistant":
            roots.append(child.id)
    elif (
        node.role == "assistant"
        and parent.role == "user"
        and len(parent.children) == 1
        and parent.id != tree.root_node_id
    ):
        roots.append(parent.id)
    return roots


def delete_node_and_descendants(tree: DialogMap, node_id: str) -> DialogMap:
    if node_id == tree.root_node_id:
        raise CannotDeleteRoot(node_id)
    node = tree.nodes.get(node_id)
    if node is None:
        raise NodeNotFound(node_id)
    parent: Optional[DialogMapNode] = tree.nodes.get(node.parent_id) if node.parent_id else None
    if parent is None:
        raise ParentNotFound(node_id)

    doomed = _collect_subtree(tree, _deletion_roots(tree, node, parent))

    for doomed_id in doomed:
        del tree.nodes[doomed_id]
    for survivor in tree.nodes.values():
        if any(child_id in doomed for child_id in survivor.children):
            survivor.children = [child_id for child_id in survivor.children if child_id not in doomed]

    path = [path_id for path_id in tree.selected_path if path_id not in doomed]
    if not path:
        path = build_default_path(tree)
    apply_selection(tree, path)
    tree.touch()
    logger.debug("Deleted %d nodes starting at %s", len(doomed), node_id)
    return tree

"""Reconcile flat topic message logs with a branching dialog map."""

from __future__ import annotations

import logging
from collections import ChainMap
from typing import Dict, Mapping, Optional, Sequence

from .errors import EmptyConversation, NodeNotFound
from .mutations import apply_selection
from .types import ChatMessage, DialogMap, DialogMapNode, Role

logger = logging.getLogger(__name__)


def build_tree_from_messages(messages: Sequence[ChatMessage], topic_id: str) -> DialogMap:
    """Chain every message under the one before it; the first becomes the root."""
    if not messages:
        raise EmptyConversation()

    nodes: Dict[str, DialogMapNode] = {}
    previous: Optional[DialogMapNode] = None
    for message in messages:
        node = DialogMapNode.from_message(message, previous.id if previous else None)
        if previous is not None:
            previous.children.append(node.id)
        nodes[node.id] = node
        previous = node

    root_node_id = next(iter(nodes))
    tree = DialogMap(topic_id=topic_id, root_node_id=root_node_id, nodes=nodes)
    apply_selection(tree, list(nodes))
    normalize_root(tree)
    logger.debug("Built dialog map %s for topic %s with %d nodes", tree.id, topic_id, len(tree.nodes))
    return tree


def _resolve_parent(
    lookup: Mapping[str, DialogMapNode],
    parent_id: str,
    role: Role,
) -> str:
    """Walk up from ``parent_id`` to the nearest node whose role differs from ``role``.

    If every ancestor shares the role the original parent is kept.
    """
    current_id: Optional[str] = parent_id
    seen = set()
    while current_id and current_id not in seen:
        seen.add(current_id)
        node = lookup.get(current_id)
        if node is None:
            break
        if node.role != role:
            return current_id
        current_id = node.parent_id
    return parent_id


def _find_divergence(new_path: Sequence[str], known: Mapping[str, str]) -> int:
    """Index of the first unknown message that follows a known one, or -1.

    Unknown ids ahead of the first known one are history the tree no longer
    holds (a promoted root drops the messages before it) and are skipped.
    """
    leading_unknown = 0
    while leading_unknown < len(new_path) and new_path[leading_unknown] not in known:
        leading_unknown += 1
    if new_path and leading_unknown == len(new_path):
        raise NodeNotFound(new_path[0], "no message in the new path is part of the dialog map")
    if leading_unknown:
        logger.debug("Skipped %d leading messages that precede the dialog map root", leading_unknown)

    for index in range(leading_unknown, len(new_path)):
        if new_path[index] not in known:
            return index
    return -1


def merge_new_messages(
    tree: DialogMap,
    new_path: Sequence[str],
    messages_by_id: Mapping[str, ChatMessage],
) -> DialogMap:
    """Add the unseen tail of ``new_path`` to ``tree`` without duplicating shared history.

    ``new_path`` is the topic's linear log as message ids. The first id without
    a node marks the divergence point; everything from there on is attached
    under the node of the message just before it. Returns ``tree`` untouched
    when every id is already represented.
    """
    known = {node.message_id: node.id for node in tree.nodes.values()}
    first_new = _find_divergence(new_path, known)
    if first_new == -1:
        return tree

    created: Dict[str, DialogMapNode] = {}
    lookup = ChainMap(created, tree.nodes)
    current_parent_id = known[new_path[first_new - 1]]

    for message_id in new_path[first_new:]:
        if message_id in known:
            current_parent_id = known[message_id]
            continue
        message = messages_by_id.get(message_id)
        if message is None:
            logger.warning("Message %s not found in topic messages", message_id)
            continue

        parent = lookup.get(current_parent_id)
        if parent is not None and parent.role == message.role:
            repaired_id = _resolve_parent(lookup, current_parent_id, message.role)
            if repaired_id != current_parent_id:
                logger.warning(
                    "Role %s repeats after node %s; attaching message %s under %s instead",
                    message.role,
                    current_parent_id,
                    message_id,
                    repaired_id,
                )
            current_parent_id = repaired_id

        node = DialogMapNode.from_message(message, current_parent_id)
        lookup[current_parent_id].children.append(node.id)
        created[node.id] = node
        known[message_id] = node.id
        current_parent_id = node.id

    if not created:
        return tree

    tree.nodes.update(created)
    normalize_root(tree)
    tree.touch()
    logger.debug("Merged %d new nodes into dialog map %s", len(created), tree.id)
    return tree


def normalize_root(tree: DialogMap) -> DialogMap:
    """Make sure the root is a user node, promoting the first user node if needed."""
    root = next((node for node in tree.nodes.values() if not node.parent_id), None)
    if root is None:
        logger.warning("Dialog map %s has no parentless node", tree.id)
        return tree
    if root.role == "user":
        tree.root_node_id = root.id
        return tree

    new_root = next((node for node in tree.nodes.values() if node.role == "user"), None)
    if new_root is None:
        logger.warning("Dialog map %s has no user node to promote to root", tree.id)
        tree.root_node_id = root.id
        return tree

    former_parent = tree.nodes.get(new_root.parent_id) if new_root.parent_id else None
    if former_parent is not None:
        former_parent.children = [child_id for child_id in former_parent.children if child_id != new_root.id]
    new_root.parent_id = None

    for node in tree.nodes.values():
        if node.id != new_root.id and node.parent_id == root.id:
            node.parent_id = new_root.id
            new_root.children.append(node.id)

    del tree.nodes[root.id]
    tree.root_node_id = new_root.id
    apply_selection(tree, [node_id for node_id in tree.selected_path if node_id in tree.nodes])
    tree.touch()
    logger.debug("Promoted node %s to root of dialog map %s", new_root.id, tree.id)
    return tree

"""Test helpers for dialog maps."""

from __future__ import annotations

from typing import Dict, List, Sequence

from dm_tree.types import ChatMessage, DialogMap, DialogMapNode


def user_msg(message_id: str) -> ChatMessage:
    return ChatMessage(
        id=message_id,
        role="user",
        created_at="2024-01-01T00:00:00+00:00",
        blocks=[f"{message_id}-block"],
    )


def assistant_msg(message_id: str, model_name: str = "gpt-test") -> ChatMessage:
    return ChatMessage(
        id=message_id,
        role="assistant",
        created_at="2024-01-01T00:00:01+00:00",
        model_id="gpt-test",
        model={"id": "gpt-test", "name": model_name},
        blocks=[f"{message_id}-block"],
    )


def conversation(*message_ids: str) -> List[ChatMessage]:
    """Alternating messages named like ``u1``/``a1``: the prefix picks the role."""
    return [user_msg(mid) if mid.startswith("u") else assistant_msg(mid) for mid in message_ids]


def by_message(tree: DialogMap) -> Dict[str, DialogMapNode]:
    return {node.message_id: node for node in tree.nodes.values()}


def message_ids(tree: DialogMap, path: Sequence[str]) -> List[str]:
    return [tree.nodes[node_id].message_id for node_id in path]


def assert_valid_path(tree: DialogMap, path: Sequence[str]) -> None:
    for node_id in path:
        assert node_id in tree.nodes
    for parent_id, child_id in zip(path, path[1:]):
        assert tree.nodes[child_id].parent_id == parent_id
        assert child_id in tree.nodes[parent_id].children


def assert_roles_alternate(tree: DialogMap) -> None:
    for node in tree.nodes.values():
        for child_id in node.children:
            assert tree.nodes[child_id].role != node.role

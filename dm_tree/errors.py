"""Typed failures raised by the dialog map engines and service."""

from __future__ import annotations

from typing import List, Optional


class DialogMapError(Exception):
    pass


class TopicNotFound(DialogMapError, LookupError):
    def __init__(self, topic_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Topic with id {topic_id} not found")
        self.topic_id = topic_id


class DialogMapNotFound(TopicNotFound):
    def __init__(self, dialog_map_id: str) -> None:
        super().__init__(dialog_map_id, f"DialogMap with id {dialog_map_id} not found")
        self.dialog_map_id = dialog_map_id


class EmptyConversation(DialogMapError, ValueError):
    def __init__(self) -> None:
        super().__init__("No root node found in the conversation")


class CannotDeleteRoot(DialogMapError, ValueError):
    def __init__(self, node_id: str) -> None:
        super().__init__("Cannot delete root node")
        self.node_id = node_id


class NodeNotFound(DialogMapError, LookupError):
    def __init__(self, node_id: str, detail: str = "") -> None:
        message = f"Node with id {node_id} not found in dialog map"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.node_id = node_id


class ParentNotFound(DialogMapError, LookupError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Parent node not found for node {node_id}")
        self.node_id = node_id


class DanglingNode(DialogMapError, LookupError):
    """An ancestor walk hit a parent id that is not in the tree."""

    def __init__(self, node_id: str, missing_parent_id: str, partial_path: List[str]) -> None:
        super().__init__(f"Node {node_id} references missing parent {missing_parent_id}")
        self.node_id = node_id
        self.missing_parent_id = missing_parent_id
        self.partial_path = partial_path

"""Core types for dialog map trees and the chat messages they are built from."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_id() -> str:
    return uuid4().hex


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    id: str
    role: Role
    created_at: Optional[str] = None
    model_id: Optional[str] = None
    model: Optional[Dict[str, Any]] = None
    blocks: List[Any] = Field(default_factory=list)
    topic_id: Optional[str] = None
    assistant_id: Optional[str] = None
    status: Optional[str] = None


class Topic(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    messages: List[ChatMessage] = Field(default_factory=list)


class DialogMapNode(BaseModel):
    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    id: str = Field(default_factory=generate_id)
    message_id: str
    parent_id: Optional[str] = None
    role: Role
    children: List[str] = Field(default_factory=list)
    is_selected: bool = False
    created_at: Optional[str] = None
    model_id: Optional[str] = None
    model: Optional[Dict[str, Any]] = None
    blocks: List[Any] = Field(default_factory=list)

    @classmethod
    def from_message(cls, message: ChatMessage, parent_id: Optional[str]) -> "DialogMapNode":
        return cls(
            message_id=message.id,
            parent_id=parent_id,
            role=message.role,
            blocks=list(message.blocks),
            created_at=message.created_at,
            model_id=message.model_id,
            model=dict(message.model) if message.model else None,
        )


class DialogMap(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=generate_id)
    topic_id: str
    root_node_id: str
    nodes: Dict[str, DialogMapNode] = Field(default_factory=dict)
    selected_path: List[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)

    def touch(self) -> None:
        self.updated_at = now_iso()

"""Async dialog map service: loads topics, runs the tree engines and persists results."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from dm_store.base import DIALOG_MAPS, SETTINGS, TOPICS, DialogMapStore
from dm_tree.errors import DialogMapNotFound, TopicNotFound
from dm_tree.flow import FlowData, build_flow_data
from dm_tree.layout import LayoutConfig
from dm_tree.mutations import (
    append_child_chain,
    build_default_path,
    delete_node_and_descendants,
    set_selected_path,
)
from dm_tree.paths import ancestors, full_path, resolve_optimal_path
from dm_tree.reconcile import build_tree_from_messages, merge_new_messages, normalize_root
from dm_tree.serialization import (
    dialog_map_from_record,
    dialog_map_to_record,
    topic_from_record,
    topic_to_record,
)
from dm_tree.types import ChatMessage, DialogMap, Topic

logger = logging.getLogger(__name__)

COLLAPSED_NODES_SETTING = "dialogMapCollapsedNodes"


class DialogMapService:
    """Calling layer around the pure tree engines.

    Every mutating method reads the current record, applies one engine
    operation and writes the result back. Callers must not run two mutations
    against the same dialog map concurrently. Nothing here publishes change
    notifications; path-changing methods return what the UI needs to refresh.
    """

    def __init__(self, store: DialogMapStore, *, layout_config: Optional[LayoutConfig] = None) -> None:
        self._store = store
        self._layout_config = layout_config or LayoutConfig()

    @property
    def store(self) -> DialogMapStore:
        return self._store

    @property
    def layout_config(self) -> LayoutConfig:
        return self._layout_config

    async def _get_topic(self, topic_id: str) -> Topic:
        record = await self._store.get(TOPICS, topic_id)
        if record is None:
            raise TopicNotFound(topic_id)
        return topic_from_record(record)

    async def _save(self, dialog_map: DialogMap) -> DialogMap:
        await self._store.put(DIALOG_MAPS, dialog_map_to_record(dialog_map))
        return dialog_map

    async def get_dialog_map(self, dialog_map_id: str) -> DialogMap:
        record = await self._store.get(DIALOG_MAPS, dialog_map_id)
        if record is None:
            raise DialogMapNotFound(dialog_map_id)
        return dialog_map_from_record(record)

    async def get_dialog_map_by_topic_id(self, topic_id: str) -> Optional[DialogMap]:
        records = await self._store.query_by_field(DIALOG_MAPS, "topicId", topic_id)
        return dialog_map_from_record(records[0]) if records else None

    async def create_dialog_map_from_topic(self, topic_id: str) -> DialogMap:
        existing = await self.get_dialog_map_by_topic_id(topic_id)
        if existing is not None:
            return existing

        topic = await self._get_topic(topic_id)
        dialog_map = build_tree_from_messages(topic.messages, topic_id)
        logger.info("Created dialog map %s for topic %s", dialog_map.id, topic_id)
        return await self._save(dialog_map)

    async def update_dialog_map(self, topic_id: str, new_path: Sequence[str]) -> DialogMap:
        dialog_map = await self.get_dialog_map_by_topic_id(topic_id)
        if dialog_map is None:
            raise TopicNotFound(topic_id, f"No dialog map found for topic {topic_id}")
        topic = await self._get_topic(topic_id)

        before = set(dialog_map.nodes)
        messages_by_id = {message.id: message for message in topic.messages}
        merge_new_messages(dialog_map, new_path, messages_by_id)
        if set(dialog_map.nodes) == before:
            return dialog_map
        return await self._save(dialog_map)

    async def load_dialog_map(self, topic_id: str) -> DialogMap:
        """Get or create the topic's map, fold in its current message log and fix up the root."""
        topic = await self._get_topic(topic_id)
        await self.create_dialog_map_from_topic(topic_id)
        dialog_map = await self.update_dialog_map(topic_id, [message.id for message in topic.messages])

        root_before = dialog_map.root_node_id
        normalize_root(dialog_map)
        if dialog_map.root_node_id != root_before:
            await self._save(dialog_map)
        return dialog_map

    async def set_selected_path(self, dialog_map_id: str, path: Sequence[str]) -> DialogMap:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        set_selected_path(dialog_map, path)
        return await self._save(dialog_map)

    async def add_child_dialog(
        self,
        dialog_map_id: str,
        parent_node_id: str,
        messages: Sequence[ChatMessage],
    ) -> DialogMap:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        append_child_chain(dialog_map, parent_node_id, messages)
        return await self._save(dialog_map)

    async def delete_node_and_descendants(self, dialog_map_id: str, node_id: str) -> DialogMap:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        delete_node_and_descendants(dialog_map, node_id)
        return await self._save(dialog_map)

    async def get_node_full_path(self, dialog_map_id: str, node_id: str) -> List[str]:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        return full_path(dialog_map, node_id)

    async def get_node_ancestors(self, dialog_map_id: str, node_id: str) -> List[str]:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        return ancestors(dialog_map, node_id)

    async def find_and_apply_optimal_path(self, dialog_map_id: str, selected_node_ids: Sequence[str]) -> DialogMap:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        set_selected_path(dialog_map, resolve_optimal_path(dialog_map, selected_node_ids))
        return await self._save(dialog_map)

    async def notify_branch_creation(self, dialog_map_id: str, node_id: str) -> List[str]:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        path = ancestors(dialog_map, node_id)
        set_selected_path(dialog_map, path)
        await self._save(dialog_map)
        return path

    async def generate_messages_from_path(self, dialog_map: DialogMap, path: Sequence[str]) -> List[ChatMessage]:
        """Turn a node path into the topic's message list, restoring messages the topic lost."""
        if not path:
            return []

        topic = await self._get_topic(dialog_map.topic_id)
        messages_by_id: Dict[str, ChatMessage] = {message.id: message for message in topic.messages}

        messages: List[ChatMessage] = []
        for node_id in path:
            node = dialog_map.nodes.get(node_id)
            if node is None:
                continue
            message = messages_by_id.get(node.message_id)
            if message is None:
                message = ChatMessage(
                    id=node.message_id,
                    role=node.role,
                    created_at=node.created_at,
                    model_id=node.model_id or "",
                    model=node.model,
                    blocks=[],
                    topic_id=dialog_map.topic_id,
                    assistant_id=node.model_id or "",
                    status="success",
                )
                topic.messages.append(message)
                messages_by_id[message.id] = message
            messages.append(message)

        if len(messages) != len(path):
            logger.warning("Generated %d messages but path has %d nodes", len(messages), len(path))

        await self._store.put(TOPICS, topic_to_record(topic))
        return messages

    async def process_path_change_and_generate_messages(
        self,
        dialog_map_id: str,
        path: Sequence[str],
    ) -> List[ChatMessage]:
        dialog_map = await self.set_selected_path(dialog_map_id, path)
        return await self.generate_messages_from_path(dialog_map, path)

    async def create_default_path(self, dialog_map_id: str) -> List[str]:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        path = build_default_path(dialog_map)
        set_selected_path(dialog_map, path)
        await self._save(dialog_map)
        return path

    async def get_collapsed_nodes(self, topic_id: str) -> List[str]:
        record = await self._store.get(SETTINGS, COLLAPSED_NODES_SETTING)
        if record is None:
            return []
        return list((record.get("value") or {}).get(topic_id) or [])

    async def set_node_collapsed(self, topic_id: str, node_id: str, collapsed: bool) -> List[str]:
        record = await self._store.get(SETTINGS, COLLAPSED_NODES_SETTING) or {"id": COLLAPSED_NODES_SETTING}
        value = dict(record.get("value") or {})
        current = [existing for existing in value.get(topic_id) or [] if existing != node_id]
        if collapsed:
            current.append(node_id)
        value[topic_id] = current
        await self._store.put(SETTINGS, {"id": COLLAPSED_NODES_SETTING, "value": value})
        return current

    async def build_flow_data(self, dialog_map_id: str) -> FlowData:
        dialog_map = await self.get_dialog_map(dialog_map_id)
        collapsed = await self.get_collapsed_nodes(dialog_map.topic_id)
        return build_flow_data(dialog_map, self._layout_config, collapsed)

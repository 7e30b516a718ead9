"""Conversion between dialog map entities and camelCase store records."""

from __future__ import annotations

import re
from typing import Any, Dict

from .types import ChatMessage, DialogMap, Topic


def to_camel_key(key: str) -> str:
    if "_" not in key:
        return key
    parts = [part for part in key.split("_") if part]
    if not parts:
        return key
    return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def to_snake_key(key: str) -> str:
    if "_" in key:
        return key
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", key)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def convert_entity_keys(value: Dict[str, Any], key_fn) -> Dict[str, Any]:
    # Top level only: payloads such as `model` and `blocks` keep their own key style.
    converted: Dict[str, Any] = {}
    for key, val in value.items():
        new_key = key_fn(key)
        converted[new_key] = val
    return converted


def message_to_record(message: ChatMessage) -> Dict[str, Any]:
    return convert_entity_keys(message.model_dump(exclude_none=True), to_camel_key)


def message_from_record(record: Dict[str, Any]) -> ChatMessage:
    return ChatMessage.model_validate(convert_entity_keys(record, to_snake_key))


def topic_to_record(topic: Topic) -> Dict[str, Any]:
    data = convert_entity_keys(topic.model_dump(exclude={"messages"}), to_camel_key)
    data["messages"] = [message_to_record(message) for message in topic.messages]
    return data


def topic_from_record(record: Dict[str, Any]) -> Topic:
    data = convert_entity_keys({k: v for k, v in record.items() if k != "messages"}, to_snake_key)
    data["messages"] = [message_from_record(message) for message in record.get("messages") or []]
    return Topic.model_validate(data)


def dialog_map_to_record(tree: DialogMap) -> Dict[str, Any]:
    data = convert_entity_keys(tree.model_dump(exclude={"nodes"}), to_camel_key)
    data["nodes"] = {
        node_id: convert_entity_keys(node.model_dump(), to_camel_key) for node_id, node in tree.nodes.items()
    }
    return data


def dialog_map_from_record(record: Dict[str, Any]) -> DialogMap:
    data = convert_entity_keys({k: v for k, v in record.items() if k != "nodes"}, to_snake_key)
    data["nodes"] = {
        node_id: convert_entity_keys(node, to_snake_key) for node_id, node in (record.get("nodes") or {}).items()
    }
    return DialogMap.model_validate(data)

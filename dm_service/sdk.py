"""Entry point for embedding the dialog map service."""

from __future__ import annotations

from typing import Optional

from dm_store.base import DialogMapStore
from dm_store.json_file import JsonFileStore
from dm_store.memory import InMemoryStore
from dm_tree.layout import LayoutConfig

from .env import get_env_data_dir, layout_config_from_env
from .service import DialogMapService


def create_dialog_map_service(
    *,
    store: Optional[DialogMapStore] = None,
    data_dir: Optional[str] = None,
    layout_config: Optional[LayoutConfig] = None,
) -> DialogMapService:
    resolved_dir = data_dir or get_env_data_dir()
    if store is not None:
        resolved_store = store
    elif resolved_dir:
        resolved_store = JsonFileStore(resolved_dir)
    else:
        resolved_store = InMemoryStore()
    return DialogMapService(resolved_store, layout_config=layout_config or layout_config_from_env())

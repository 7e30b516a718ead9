"""Async service layer for dialog maps."""

from .env import layout_config_from_env
from .sdk import create_dialog_map_service
from .service import COLLAPSED_NODES_SETTING, DialogMapService

__all__ = [
    "COLLAPSED_NODES_SETTING",
    "DialogMapService",
    "create_dialog_map_service",
    "layout_config_from_env",
]

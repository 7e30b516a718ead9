"""Environment variable overrides for layout tuning and storage location."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from dm_tree.layout import LayoutConfig

_ENV_KEY_BY_FIELD: Dict[str, str] = {
    "node_width": "DIALOG_MAP_NODE_WIDTH",
    "node_margin": "DIALOG_MAP_NODE_MARGIN",
    "vertical_gap": "DIALOG_MAP_VERTICAL_GAP",
    "horizontal_gap": "DIALOG_MAP_HORIZONTAL_GAP",
    "initial_x": "DIALOG_MAP_INITIAL_X",
    "initial_y": "DIALOG_MAP_INITIAL_Y",
    "max_nodes_per_level": "DIALOG_MAP_MAX_NODES_PER_LEVEL",
    "alternating_offset": "DIALOG_MAP_ALTERNATING_OFFSET",
    "recenter_tolerance": "DIALOG_MAP_RECENTER_TOLERANCE",
}

DATA_DIR_ENV_KEY = "DIALOG_MAP_DATA_DIR"


def layout_config_from_env() -> LayoutConfig:
    # Values are validated (and coerced from strings) by the pydantic model.
    overrides: Dict[str, Any] = {}
    for field_name, env_key in _ENV_KEY_BY_FIELD.items():
        value = os.getenv(env_key)
        if value:
            overrides[field_name] = value
    return LayoutConfig(**overrides)


def get_env_data_dir() -> Optional[str]:
    return os.getenv(DATA_DIR_ENV_KEY) or None

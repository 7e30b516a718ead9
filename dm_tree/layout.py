"""Deterministic 2D layout for dialog maps.

Nodes sit in horizontal bands by depth. Siblings fan out around their parent,
alternating right and left, then each band is pushed apart until no two
boxes overlap and re-centred on ``initial_x``. Moving a node always moves its
whole subtree with it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict

from .types import DialogMap, DialogMapNode

Side = Literal["top", "bottom", "left", "right"]


class LayoutConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    node_width: float = 240
    node_margin: float = 40
    vertical_gap: float = 220
    horizontal_gap: float = 360
    initial_x: float = 400
    initial_y: float = 100
    max_nodes_per_level: int = 4
    alternating_offset: float = 0.8
    recenter_tolerance: float = 10

    @property
    def min_spacing(self) -> float:
        return self.node_width + self.node_margin


@dataclass
class NodePosition:
    node_id: str
    x: float
    y: float


@dataclass(frozen=True)
class EdgeRoute:
    source: str
    target: str
    source_side: Side
    target_side: Side
    is_horizontal: bool


@dataclass
class LayoutResult:
    positions: Dict[str, NodePosition] = field(default_factory=dict)
    levels: Dict[str, int] = field(default_factory=dict)
    edges: List[EdgeRoute] = field(default_factory=list)


def calculate_node_levels(nodes: Mapping[str, DialogMapNode]) -> Dict[str, int]:
    """Assign depth levels by walking down from every parentless node."""
    levels: Dict[str, int] = {}
    for root in [node for node in nodes.values() if not node.parent_id]:
        stack = [(root.id, 0)]
        while stack:
            node_id, level = stack.pop()
            if node_id in levels:
                continue
            levels[node_id] = level
            node = nodes.get(node_id)
            if node is None:
                continue
            # Reverse so children are visited in insertion order.
            for child_id in reversed(node.children):
                if child_id in nodes:
                    stack.append((child_id, level + 1))
    return levels


def _group_by_level(levels: Mapping[str, int]) -> Dict[int, List[str]]:
    grouped: Dict[int, List[str]] = {}
    for node_id, level in levels.items():
        grouped.setdefault(level, []).append(node_id)
    return dict(sorted(grouped.items()))


def _sibling_offset(index: int, count: int, cfg: LayoutConfig) -> float:
    if count <= 1:
        return 0.0
    if count % 2 == 1 and index == 0:
        return 0.0
    direction = 1 if index % 2 == 0 else -1
    magnitude = math.floor((index + 1) / 2)
    return direction * magnitude * cfg.min_spacing * cfg.alternating_offset


def _shift_descendants(
    nodes: Mapping[str, DialogMapNode],
    positions: Dict[str, NodePosition],
    node_id: str,
    dx: float,
) -> None:
    visited: Set[str] = {node_id}
    stack = list(nodes[node_id].children) if node_id in nodes else []
    while stack:
        child_id = stack.pop()
        if child_id in visited or child_id not in positions:
            continue
        visited.add(child_id)
        positions[child_id].x += dx
        child = nodes.get(child_id)
        if child is not None:
            stack.extend(child.children)


def _place_initial(
    nodes: Mapping[str, DialogMapNode],
    by_level: Mapping[int, List[str]],
    cfg: LayoutConfig,
) -> Dict[str, NodePosition]:
    positions: Dict[str, NodePosition] = {}
    max_spread = cfg.max_nodes_per_level * cfg.min_spacing / 2
    min_x = cfg.initial_x - max_spread
    max_x = cfg.initial_x + max_spread

    for level, node_ids in by_level.items():
        y = cfg.initial_y + level * cfg.vertical_gap
        for index, node_id in enumerate(node_ids):
            if level == 0:
                positions[node_id] = NodePosition(node_id, cfg.initial_x, y)
                continue

            node = nodes[node_id]
            parent = nodes.get(node.parent_id) if node.parent_id else None
            if parent is None or parent.id not in positions:
                x = cfg.initial_x + (index - len(node_ids) / 2) * cfg.horizontal_gap
                positions[node_id] = NodePosition(node_id, x, y)
                continue

            offset = _sibling_offset(parent.children.index(node_id), len(parent.children), cfg)
            x = min(max(positions[parent.id].x + offset, min_x), max_x)
            positions[node_id] = NodePosition(node_id, x, y)

    return positions


def _resolve_overlaps(
    nodes: Mapping[str, DialogMapNode],
    by_level: Mapping[int, List[str]],
    positions: Dict[str, NodePosition],
    cfg: LayoutConfig,
) -> None:
    for node_ids in by_level.values():
        if len(node_ids) <= 1:
            continue

        ordered = sorted(node_ids, key=lambda node_id: positions[node_id].x)
        for previous_id, current_id in zip(ordered, ordered[1:]):
            previous = positions[previous_id]
            current = positions[current_id]
            if current.x - previous.x < cfg.min_spacing:
                target_x = previous.x + cfg.min_spacing
                adjustment = target_x - current.x
                current.x = target_x
                _shift_descendants(nodes, positions, current_id, adjustment)

        center = (positions[ordered[0]].x + positions[ordered[-1]].x) / 2
        if abs(center - cfg.initial_x) > cfg.recenter_tolerance:
            correction = cfg.initial_x - center
            for node_id in ordered:
                positions[node_id].x += correction
                _shift_descendants(nodes, positions, node_id, correction)


def route_edge(source: NodePosition, target: NodePosition, cfg: LayoutConfig) -> EdgeRoute:
    dx = target.x - source.x
    threshold = cfg.node_width / 2
    if dx < -threshold:
        return EdgeRoute(source.node_id, target.node_id, "left", "right", True)
    if dx > threshold:
        return EdgeRoute(source.node_id, target.node_id, "right", "left", True)
    return EdgeRoute(source.node_id, target.node_id, "bottom", "top", False)


def layout_nodes(nodes: Mapping[str, DialogMapNode], cfg: Optional[LayoutConfig] = None) -> LayoutResult:
    cfg = cfg or LayoutConfig()
    levels = calculate_node_levels(nodes)
    by_level = _group_by_level(levels)
    positions = _place_initial(nodes, by_level, cfg)
    _resolve_overlaps(nodes, by_level, positions, cfg)

    edges: List[EdgeRoute] = []
    for node_id in levels:
        node = nodes[node_id]
        for child_id in node.children:
            if child_id in positions:
                edges.append(route_edge(positions[node_id], positions[child_id], cfg))

    return LayoutResult(positions=positions, levels=levels, edges=edges)


def compute_layout(tree: DialogMap, cfg: Optional[LayoutConfig] = None) -> LayoutResult:
    return layout_nodes(tree.nodes, cfg)

"""Renderer-neutral node and edge descriptors for drawing a dialog map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from .layout import LayoutConfig, Side, layout_nodes
from .types import DialogMap, DialogMapNode, Role


@dataclass
class FlowNode:
    id: str
    message_id: str
    role: Role
    x: float
    y: float
    is_selected: bool
    model_id: Optional[str]
    model_name: Optional[str]
    children_count: int
    is_collapsed: bool
    blocks: List[Any]


@dataclass
class FlowEdge:
    id: str
    source: str
    target: str
    source_side: Side
    target_side: Side
    is_horizontal: bool
    is_selected: bool


@dataclass
class FlowData:
    nodes: List[FlowNode]
    edges: List[FlowEdge]


def _visible_nodes(tree: DialogMap, collapsed: Set[str]) -> Dict[str, DialogMapNode]:
    visible: Dict[str, DialogMapNode] = {}
    stack = [tree.root_node_id] if tree.root_node_id in tree.nodes else []
    while stack:
        node_id = stack.pop()
        if node_id in visible or node_id not in tree.nodes:
            continue
        node = tree.nodes[node_id]
        if node_id in collapsed:
            visible[node_id] = node.model_copy(update={"children": []})
            continue
        visible[node_id] = node
        stack.extend(reversed(node.children))
    return visible


def build_flow_data(
    tree: DialogMap,
    cfg: Optional[LayoutConfig] = None,
    collapsed: Iterable[str] = (),
) -> FlowData:
    """Lay out the visible part of ``tree``; descendants of collapsed nodes are hidden."""
    collapsed_ids = set(collapsed)
    visible = _visible_nodes(tree, collapsed_ids)
    layout = layout_nodes(visible, cfg)

    nodes: List[FlowNode] = []
    for node_id, position in layout.positions.items():
        node = visible[node_id]
        original = tree.nodes[node_id]
        nodes.append(
            FlowNode(
                id=node_id,
                message_id=node.message_id,
                role=node.role,
                x=position.x,
                y=position.y,
                is_selected=node.is_selected,
                model_id=node.model_id,
                model_name=(node.model or {}).get("name"),
                children_count=len(original.children),
                is_collapsed=node_id in collapsed_ids,
                blocks=node.blocks,
            )
        )

    edges = [
        FlowEdge(
            id=f"edge-{route.source}-to-{route.target}",
            source=route.source,
            target=route.target,
            source_side=route.source_side,
            target_side=route.target_side,
            is_horizontal=route.is_horizontal,
            is_selected=visible[route.source].is_selected and visible[route.target].is_selected,
        )
        for route in layout.edges
    ]
    return FlowData(nodes=nodes, edges=edges)

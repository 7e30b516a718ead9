"""Dialog map trees: reconciliation, path selection, structural edits and layout."""

from .errors import (
    CannotDeleteRoot,
    DanglingNode,
    DialogMapError,
    DialogMapNotFound,
    EmptyConversation,
    NodeNotFound,
    ParentNotFound,
    TopicNotFound,
)
from .flow import FlowData, FlowEdge, FlowNode, build_flow_data
from .layout import EdgeRoute, LayoutConfig, LayoutResult, NodePosition, calculate_node_levels, compute_layout
from .mutations import (
    append_child_chain,
    apply_selection,
    build_default_path,
    delete_node_and_descendants,
    set_selected_path,
)
from .paths import ancestors, full_path, node_depth, primary_descendants, resolve_optimal_path
from .reconcile import build_tree_from_messages, merge_new_messages, normalize_root
from .types import ChatMessage, DialogMap, DialogMapNode, Role, Topic

__all__ = [
    "CannotDeleteRoot",
    "ChatMessage",
    "DanglingNode",
    "DialogMap",
    "DialogMapError",
    "DialogMapNode",
    "DialogMapNotFound",
    "EdgeRoute",
    "EmptyConversation",
    "FlowData",
    "FlowEdge",
    "FlowNode",
    "LayoutConfig",
    "LayoutResult",
    "NodeNotFound",
    "NodePosition",
    "ParentNotFound",
    "Role",
    "Topic",
    "TopicNotFound",
    "ancestors",
    "append_child_chain",
    "apply_selection",
    "build_default_path",
    "build_flow_data",
    "build_tree_from_messages",
    "calculate_node_levels",
    "compute_layout",
    "delete_node_and_descendants",
    "full_path",
    "merge_new_messages",
    "node_depth",
    "normalize_root",
    "primary_descendants",
    "resolve_optimal_path",
    "set_selected_path",
]

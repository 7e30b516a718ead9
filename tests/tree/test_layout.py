from itertools import combinations

import pytest

from dm_tree.layout import LayoutConfig, calculate_node_levels, compute_layout
from dm_tree.mutations import append_child_chain
from dm_tree.types import DialogMap, DialogMapNode

from tests.helpers import assistant_msg, by_message, conversation, user_msg


@pytest.fixture
def branched_tree(linear_tree):
    nodes = by_message(linear_tree)
    append_child_chain(linear_tree, nodes["a1"].id, conversation("u2b", "a2b"))
    return linear_tree


def _x(layout, tree, message_id):
    return layout.positions[by_message(tree)[message_id].id].x


def test_levels_follow_depth(branched_tree):
    levels = calculate_node_levels(branched_tree.nodes)
    nodes = by_message(branched_tree)
    assert levels[nodes["u1"].id] == 0
    assert levels[nodes["a1"].id] == 1
    assert levels[nodes["u2"].id] == levels[nodes["u2b"].id] == 2
    assert levels[nodes["a2"].id] == levels[nodes["a2b"].id] == 3


def test_linear_chain_is_a_vertical_column(linear_tree):
    layout = compute_layout(linear_tree)
    for node_id, position in layout.positions.items():
        assert position.x == pytest.approx(400)
        assert position.y == pytest.approx(100 + layout.levels[node_id] * 220)
    assert all(edge.source_side == "bottom" and edge.target_side == "top" for edge in layout.edges)
    assert not any(edge.is_horizontal for edge in layout.edges)


def test_two_branches_are_spread_and_recentered(branched_tree):
    layout = compute_layout(branched_tree)
    assert _x(layout, branched_tree, "u1") == pytest.approx(400)
    assert _x(layout, branched_tree, "a1") == pytest.approx(400)
    assert _x(layout, branched_tree, "u2b") == pytest.approx(260)
    assert _x(layout, branched_tree, "u2") == pytest.approx(540)
    # Subtrees move with their roots.
    assert _x(layout, branched_tree, "a2b") == pytest.approx(260)
    assert _x(layout, branched_tree, "a2") == pytest.approx(540)


def test_three_siblings_keep_first_under_parent(linear_tree):
    nodes = by_message(linear_tree)
    append_child_chain(linear_tree, nodes["u2"].id, [assistant_msg("a2b"), assistant_msg("a2c")])
    layout = compute_layout(linear_tree)
    assert _x(layout, linear_tree, "a2") == pytest.approx(400)
    assert _x(layout, linear_tree, "a2b") == pytest.approx(120)
    assert _x(layout, linear_tree, "a2c") == pytest.approx(680)


def test_edge_routing_depends_on_horizontal_offset(branched_tree):
    layout = compute_layout(branched_tree)
    nodes = by_message(branched_tree)
    routes = {(edge.source, edge.target): edge for edge in layout.edges}

    to_right = routes[(nodes["a1"].id, nodes["u2"].id)]
    assert (to_right.source_side, to_right.target_side, to_right.is_horizontal) == ("right", "left", True)

    to_left = routes[(nodes["a1"].id, nodes["u2b"].id)]
    assert (to_left.source_side, to_left.target_side, to_left.is_horizontal) == ("left", "right", True)

    straight = routes[(nodes["u2"].id, nodes["a2"].id)]
    assert (straight.source_side, straight.target_side) == ("bottom", "top")
    assert len(layout.edges) == len(branched_tree.nodes) - 1


def test_multiple_roots_share_level_zero():
    tree = DialogMap(topic_id="t", root_node_id="r1")
    tree.nodes["r1"] = DialogMapNode(id="r1", message_id="m1", role="user")
    tree.nodes["r2"] = DialogMapNode(id="r2", message_id="m2", role="user")
    layout = compute_layout(tree)
    assert layout.levels == {"r1": 0, "r2": 0}
    assert layout.positions["r1"].x == pytest.approx(260)
    assert layout.positions["r2"].x == pytest.approx(540)


def _wide_tree() -> DialogMap:
    tree = DialogMap(topic_id="t", root_node_id="root")
    tree.nodes["root"] = DialogMapNode(id="root", message_id="root", role="user")
    for i in range(4):
        append_child_chain(tree, "root", [assistant_msg(f"a{i}")])
    for node in [n for n in tree.nodes.values() if n.role == "assistant"]:
        for j in range(3):
            messages = [user_msg(f"{node.message_id}-u{j}"), assistant_msg(f"{node.message_id}-a{j}")]
            append_child_chain(tree, node.id, messages)
    return tree


def test_nodes_on_a_level_never_overlap():
    tree = _wide_tree()
    cfg = LayoutConfig()
    layout = compute_layout(tree, cfg)

    assert len(layout.positions) == len(tree.nodes)
    by_level = {}
    for node_id, level in layout.levels.items():
        by_level.setdefault(level, []).append(layout.positions[node_id])
    for positions in by_level.values():
        for first, second in combinations(positions, 2):
            assert abs(first.x - second.x) >= cfg.min_spacing - 1e-6
            assert first.y == second.y


def test_layout_is_deterministic():
    tree = _wide_tree()
    first = compute_layout(tree)
    second = compute_layout(tree)
    assert {k: (p.x, p.y) for k, p in first.positions.items()} == {k: (p.x, p.y) for k, p in second.positions.items()}
    assert first.edges == second.edges


def _fan_tree(count: int) -> DialogMap:
    tree = DialogMap(topic_id="t", root_node_id="root")
    tree.nodes["root"] = DialogMapNode(id="root", message_id="root", role="user")
    append_child_chain(tree, "root", [assistant_msg(f"a{i}") for i in range(count)])
    return tree


def test_initial_spread_is_clamped_to_level_width():
    tree = _fan_tree(3)
    # Offsets of +-560 from the parent fall outside the 280-unit half width.
    cfg = LayoutConfig(alternating_offset=2, max_nodes_per_level=2)
    layout = compute_layout(tree, cfg)
    assert _x(layout, tree, "a0") == pytest.approx(400)
    assert _x(layout, tree, "a1") == pytest.approx(120)
    assert _x(layout, tree, "a2") == pytest.approx(680)


def test_small_center_deviation_is_not_recentered():
    tree = _fan_tree(2)
    # Siblings land at 400 and 380: exactly one spacing apart, centred 10 left.
    cfg = LayoutConfig(node_width=10, node_margin=10, alternating_offset=1)
    layout = compute_layout(tree, cfg)
    assert _x(layout, tree, "a0") == pytest.approx(400)
    assert _x(layout, tree, "a1") == pytest.approx(380)


def test_center_deviation_beyond_tolerance_is_recentered():
    tree = _fan_tree(2)
    # Siblings land at 400 and 378, centred 11 left.
    cfg = LayoutConfig(node_width=12, node_margin=10, alternating_offset=1)
    layout = compute_layout(tree, cfg)
    assert _x(layout, tree, "a0") == pytest.approx(411)
    assert _x(layout, tree, "a1") == pytest.approx(389)

import pytest

from dm_tree.flow import build_flow_data
from dm_tree.mutations import append_child_chain, set_selected_path

from tests.helpers import by_message, conversation


@pytest.fixture
def branched_tree(linear_tree):
    nodes = by_message(linear_tree)
    append_child_chain(linear_tree, nodes["a1"].id, conversation("u2b", "a2b"))
    return linear_tree


def test_flow_data_describes_every_node_and_edge(branched_tree):
    flow = build_flow_data(branched_tree)
    assert {node.id for node in flow.nodes} == set(branched_tree.nodes)
    assert len(flow.edges) == len(branched_tree.nodes) - 1

    nodes = by_message(branched_tree)
    a1 = next(node for node in flow.nodes if node.id == nodes["a1"].id)
    assert a1.role == "assistant"
    assert a1.model_name == "gpt-test"
    assert a1.children_count == 2
    assert a1.is_collapsed is False
    edge_ids = {edge.id for edge in flow.edges}
    assert f"edge-{nodes['u1'].id}-to-{nodes['a1'].id}" in edge_ids


def test_flow_edges_are_selected_only_along_selected_path(branched_tree):
    nodes = by_message(branched_tree)
    set_selected_path(branched_tree, [nodes[mid].id for mid in ("u1", "a1", "u2b", "a2b")])

    flow = build_flow_data(branched_tree)
    selected = {(edge.source, edge.target) for edge in flow.edges if edge.is_selected}
    assert selected == {
        (nodes["u1"].id, nodes["a1"].id),
        (nodes["a1"].id, nodes["u2b"].id),
        (nodes["u2b"].id, nodes["a2b"].id),
    }


def test_collapsed_nodes_hide_their_descendants(branched_tree):
    nodes = by_message(branched_tree)
    flow = build_flow_data(branched_tree, collapsed=[nodes["u2b"].id])

    visible = {node.id for node in flow.nodes}
    assert nodes["a2b"].id not in visible
    assert nodes["u2b"].id in visible
    u2b = next(node for node in flow.nodes if node.id == nodes["u2b"].id)
    assert u2b.is_collapsed is True
    assert u2b.children_count == 1
    assert all(edge.target in visible and edge.source in visible for edge in flow.edges)
    # Collapsing never changes the stored tree.
    assert branched_tree.nodes[nodes["u2b"].id].children == [nodes["a2b"].id]

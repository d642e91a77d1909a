"""Tests for input graph validation."""

import pytest

from py_realm.core.models import Link, ManualRoad, MapOverrides, Node, NodeKind
from py_realm.core.validation import GraphValidationError, validate_graph


class TestValidateGraph:
    """Test referential checks on nodes and links."""

    def test_valid_graph_is_indexed(self, kingdom_nodes, kingdom_links):
        by_id = validate_graph(kingdom_nodes, kingdom_links)
        assert set(by_id) == {"c1", "pa", "pb", "ca", "cb"}
        assert by_id["pa"].parent_id == "c1"

    def test_duplicate_id(self, kingdom_nodes):
        nodes = kingdom_nodes + [Node(id="ca", kind=NodeKind.TOWN, x=0, y=0, parent_id="pa")]
        with pytest.raises(GraphValidationError) as exc_info:
            validate_graph(nodes, [])
        assert exc_info.value.node_id == "ca"

    def test_missing_parent(self, kingdom_nodes):
        nodes = kingdom_nodes + [Node(id="t1", kind=NodeKind.TOWN, x=0, y=0, parent_id="nowhere")]
        with pytest.raises(GraphValidationError, match="nowhere"):
            validate_graph(nodes, [])

    def test_wrong_parent_kind(self, kingdom_nodes):
        nodes = kingdom_nodes + [Node(id="t1", kind=NodeKind.TOWN, x=0, y=0, parent_id="c1")]
        with pytest.raises(GraphValidationError) as exc_info:
            validate_graph(nodes, [])
        assert exc_info.value.node_id == "t1"

    def test_country_with_parent(self, kingdom_nodes):
        nodes = kingdom_nodes + [Node(id="c2", kind=NodeKind.COUNTRY, x=0, y=0, parent_id="c1")]
        with pytest.raises(GraphValidationError, match="c2"):
            validate_graph(nodes, [])

    def test_orphans_allowed(self):
        nodes = [
            Node(id="p", kind=NodeKind.PROVINCE, x=0, y=0),
            Node(id="t", kind=NodeKind.TOWN, x=5, y=5),
        ]
        assert len(validate_graph(nodes, [])) == 2

    def test_non_finite_position(self):
        nodes = [Node(id="c", kind=NodeKind.COUNTRY, x=float("inf"), y=0)]
        with pytest.raises(GraphValidationError):
            validate_graph(nodes, [])

    def test_link_to_unknown_node(self, kingdom_nodes):
        with pytest.raises(GraphValidationError) as exc_info:
            validate_graph(kingdom_nodes, [Link(source="ca", target="ghost")])
        assert exc_info.value.node_id == "ghost"

    def test_override_for_unknown_node(self, kingdom_nodes):
        overrides = MapOverrides(positions={"ghost": (1.0, 2.0)})
        with pytest.raises(GraphValidationError):
            validate_graph(kingdom_nodes, [], overrides)

    def test_manual_road_to_unknown_node(self, kingdom_nodes):
        overrides = MapOverrides(roads=[ManualRoad(id="r1", source="ca", target="ghost")])
        with pytest.raises(GraphValidationError):
            validate_graph(kingdom_nodes, [], overrides)

    def test_is_value_error(self):
        assert issubclass(GraphValidationError, ValueError)

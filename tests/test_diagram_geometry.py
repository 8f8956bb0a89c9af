"""Tests for DiagramGeometry: node rectangles, edge anchors and hit lookup."""

from flowchart_canvas.config import SurfaceConfig
from flowchart_canvas.core.diagram_geometry import DiagramGeometry
from flowchart_canvas.utils.geometry_utils import Point2D, Rectangle
from tests.helpers import edge, node


def test_default_and_explicit_sizes(model, config):
    model.insert_nodes([node("a", 10, 20), node("b", 0, 0, width=30, height=10)])
    geometry = DiagramGeometry(model, config)
    assert geometry.node_rect("a") == Rectangle(10, 20, 150, 40)
    assert geometry.node_rect("b") == Rectangle(0, 0, 30, 10)


def test_configured_default_size(model):
    model.insert_nodes([node("a")])
    geometry = DiagramGeometry(model, SurfaceConfig(default_node_width=80, default_node_height=20))
    assert geometry.node_size("a") == (80, 20)


def test_edge_runs_bottom_to_top_handle(model, config):
    model.insert_nodes([node("a", 0, 0), node("b", 200, 100)])
    model.insert_edges([edge("ab", "a", "b")])
    geometry = DiagramGeometry(model, config)
    assert geometry.edge_path(model.get_edge("ab")) == [Point2D(75, 40), Point2D(275, 100)]


def test_child_geometry_uses_absolute_position(model, config):
    model.insert_nodes([node("g", 100, 100, type="group", width=400, height=300), node("c", 10, 10, parentId="g")])
    geometry = DiagramGeometry(model, config)
    assert geometry.node_rect("c") == Rectangle(110, 110, 150, 40)


def test_snapshot_covers_live_entities(model, config):
    model.insert_nodes([node("a"), node("b", 0, 100)])
    model.insert_edges([edge("ab", "a", "b")])
    snapshot = DiagramGeometry(model, config).snapshot()
    assert set(snapshot.node_rects) == {"a", "b"}
    assert set(snapshot.edge_paths) == {"ab"}


def test_node_at_prefers_plain_nodes_over_groups(model, config):
    model.insert_nodes([node("g", 0, 0, type="group", width=400, height=300), node("c", 10, 10, parentId="g")])
    geometry = DiagramGeometry(model, config)
    assert geometry.node_at((20, 20)) == "c"
    assert geometry.node_at((300, 250)) == "g"
    assert geometry.node_at((-5, -5)) is None


def test_content_bounds(model, config):
    geometry = DiagramGeometry(model, config)
    assert geometry.content_bounds() is None
    model.insert_nodes([node("a", 0, 0), node("b", 100, 200)])
    assert geometry.content_bounds() == Rectangle(0, 0, 250, 240)

"""
Diagram Geometry Component
Derives drawable and hit-testable shapes from the diagram model: node bounding
rectangles in diagram space and edge anchor polylines running from the bottom
handle of the source node to the top handle of the target node.
"""

import logging
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from ..config import SurfaceConfig, get_surface_config
from ..models import NodeRole
from ..utils.geometry_utils import GeometryUtils, Point2D, PointLike, Rectangle, as_point
from .diagram_model import DiagramModel, Edge

logger = logging.getLogger(__name__)


@dataclass
class GeometrySnapshot:
    """Shapes of every live entity at one instant."""
    edge_paths: Dict[str, List[Point2D]] = field(default_factory=dict)
    node_rects: Dict[str, Rectangle] = field(default_factory=dict)


class DiagramGeometry:
    """Read-only geometric view over a DiagramModel."""

    def __init__(self, model: DiagramModel, config: Optional[SurfaceConfig] = None):
        self.model = model
        self.config = get_surface_config(config)

    def node_size(self, node_id: str) -> Tuple[float, float]:
        node = self.model.get_node(node_id)
        if node is not None and node.size is not None:
            return node.size
        return (self.config.default_node_width, self.config.default_node_height)

    def node_rect(self, node_id: str) -> Rectangle:
        top_left = self.model.absolute_position(node_id)
        width, height = self.node_size(node_id)
        return Rectangle(top_left.x, top_left.y, width, height)

    def edge_path(self, edge: Edge) -> List[Point2D]:
        source = self.node_rect(edge.source)
        target = self.node_rect(edge.target)
        return [
            Point2D(source.x + source.width / 2, source.bottom),
            Point2D(target.x + target.width / 2, target.y),
        ]

    def snapshot(self) -> GeometrySnapshot:
        """Capture edge paths and node rectangles from the live model."""
        snapshot = GeometrySnapshot()
        for node in self.model.nodes:
            snapshot.node_rects[node.id] = self.node_rect(node.id)
        for edge in self.model.edges:
            if self.model.has_node(edge.source) and self.model.has_node(edge.target):
                snapshot.edge_paths[edge.id] = self.edge_path(edge)
        return snapshot

    def node_at(self, point: PointLike) -> Optional[str]:
        """
        Find the node under a point.

        Plain nodes win over groups and later nodes win over earlier ones,
        matching the drawing order.
        """
        p = as_point(point)
        group_hit = None
        for node in reversed(self.model.nodes):
            if not GeometryUtils.point_in_rectangle(p, self.node_rect(node.id)):
                continue
            if node.role != NodeRole.GROUP:
                return node.id
            if group_hit is None:
                group_hit = node.id
        return group_hit

    def content_bounds(self) -> Optional[Rectangle]:
        """Bounding box of every node, or None for an empty model."""
        corners: List[Point2D] = []
        for node in self.model.nodes:
            rect = self.node_rect(node.id)
            corners.append(Point2D(rect.x, rect.y))
            corners.append(Point2D(rect.right, rect.bottom))
        if not corners:
            return None
        return GeometryUtils.bounding_box(corners)

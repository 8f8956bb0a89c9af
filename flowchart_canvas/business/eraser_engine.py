"""
Eraser Engine Component
This module turns a free-form eraser gesture into pending-removal marks on the
diagram model. Each pointer sample is appended to the open stroke, the stroke
is resampled to close fast-motion gaps and then tested against every edge path
and node rectangle currently in the model.
"""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set
from dataclasses import dataclass, field

from ..config import SurfaceConfig, get_surface_config
from ..core.diagram_geometry import DiagramGeometry
from ..core.diagram_model import DiagramModel, PendingChange, RemovalResult
from ..utils.geometry_utils import GeometryUtils, Point2D, PointLike, Rectangle, as_point

logger = logging.getLogger(__name__)


@dataclass
class EraseHits:
    """Entities touched by a stroke."""
    edge_ids: List[str] = field(default_factory=list)
    node_ids: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.edge_ids and not self.node_ids


class EraserEngine:
    """
    Modal eraser. Only one stroke may be open at a time; a start request while
    a stroke is open is ignored.
    """

    def __init__(self, model: DiagramModel, geometry: Optional[DiagramGeometry] = None,
                 config: Optional[SurfaceConfig] = None):
        """
        Initialize the eraser engine.

        Args:
            model: Diagram model whose entities are tested and marked
            geometry: Geometry view used to snapshot shapes (built from model if omitted)
            config: Surface configuration (threshold and resample gap)
        """
        self.model = model
        self.config = get_surface_config(config)
        self.geometry = geometry or DiagramGeometry(model, self.config)

        self.active: bool = False
        self._stroke: Optional[List[Point2D]] = None

        # Statistics
        self.strokes_completed: int = 0
        self.tests_run: int = 0

        # Callbacks
        self.callbacks: Dict[str, List[Callable]] = {
            'stroke_started': [],
            'hits_marked': [],
            'stroke_ended': [],
        }

    @property
    def is_stroke_open(self) -> bool:
        return self._stroke is not None

    @property
    def stroke(self) -> List[Point2D]:
        """Copy of the current (resampled) stroke, empty when none is open."""
        return list(self._stroke or [])

    def set_active(self, active: bool):
        """Toggle erase mode. Leaving erase mode closes an open stroke."""
        if self.active == active:
            return
        if not active and self.is_stroke_open:
            self.end_stroke()
        self.active = active
        logger.info(f"Eraser {'activated' if active else 'deactivated'}")

    def start_stroke(self, point: Optional[PointLike] = None) -> bool:
        """
        Open a new stroke.

        Args:
            point: Optional first sample

        Returns:
            True if a stroke was opened
        """
        if not self.active:
            logger.debug("Stroke start ignored: eraser inactive")
            return False
        if self.is_stroke_open:
            logger.debug("Stroke start ignored: a stroke is already open")
            return False

        self._stroke = []
        if point is not None:
            self._stroke.append(as_point(point))
        self._trigger_callbacks('stroke_started')
        return True

    def add_point(self, point: PointLike) -> EraseHits:
        """
        Append a pointer sample and mark whatever the stroke now touches.

        Args:
            point: Pointer position in diagram space

        Returns:
            Entities newly hit by this sample
        """
        if not self.is_stroke_open:
            return EraseHits()

        self._stroke.append(as_point(point))
        self._stroke = GeometryUtils.sample_path_points(self._stroke, self.config.resample_max_gap)
        return self._test_stroke()

    def end_stroke(self) -> RemovalResult:
        """
        Close the stroke, run a final test and commit all pending removals.

        Returns:
            The ids removed by the commit
        """
        if not self.is_stroke_open:
            return RemovalResult()

        self._test_stroke()
        self._stroke = None
        self.strokes_completed += 1

        result = self.model.commit_removals()
        self._trigger_callbacks('stroke_ended', result)
        return result

    def _test_stroke(self) -> EraseHits:
        if len(self._stroke) < 2:
            return EraseHits()

        snapshot = self.geometry.snapshot()
        hits = self.find_hits(
            self._stroke,
            snapshot.edge_paths,
            snapshot.node_rects,
            self.config.erase_proximity_threshold,
            skip_node_ids=self.model.pending_node_ids(),
            skip_edge_ids=self.model.pending_edge_ids(),
        )
        self.tests_run += 1

        if not hits.is_empty():
            self._mark(hits)
        return hits

    def _mark(self, hits: EraseHits):
        edge_ids: List[str] = list(hits.edge_ids)
        # Edges attached to an erased node fade with it
        for node_id in hits.node_ids:
            edge_ids.extend(edge.id for edge in self.model.edges_for_node(node_id))

        changed: PendingChange = self.model.mark_pending_removal(node_ids=hits.node_ids, edge_ids=edge_ids)
        if changed:
            logger.debug(f"Eraser marked nodes {sorted(changed.node_ids)} edges {sorted(changed.edge_ids)}")
            self._trigger_callbacks('hits_marked', changed)

    @staticmethod
    def find_hits(points: Sequence[PointLike],
                  edge_paths: Mapping[str, Sequence[PointLike]],
                  node_rects: Mapping[str, Rectangle],
                  threshold: float = 1.0,
                  skip_node_ids: Iterable[str] = (),
                  skip_edge_ids: Iterable[str] = ()) -> EraseHits:
        """
        Test a stroke against explicit edge paths and node rectangles.

        Args:
            points: Stroke polyline
            edge_paths: Edge id -> anchor polyline
            node_rects: Node id -> bounding rectangle
            threshold: Proximity tolerance for edges
            skip_node_ids: Node ids that need no testing (already pending)
            skip_edge_ids: Edge ids that need no testing (already pending)

        Returns:
            EraseHits in the iteration order of the inputs
        """
        skip_nodes: Set[str] = set(skip_node_ids)
        skip_edges: Set[str] = set(skip_edge_ids)
        hits = EraseHits()

        for edge_id, path in edge_paths.items():
            if edge_id in skip_edges:
                continue
            if GeometryUtils.paths_intersect(points, path, threshold):
                hits.edge_ids.append(edge_id)

        for node_id, rect in node_rects.items():
            if node_id in skip_nodes:
                continue
            if GeometryUtils.polyline_intersects_rectangle(points, rect):
                hits.node_ids.append(node_id)

        return hits

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for eraser events.

        Args:
            event_type: Type of event ('stroke_started', 'hits_marked', 'stroke_ended')
            callback: Callback function to call
        """
        if event_type in self.callbacks:
            self.callbacks[event_type].append(callback)
        else:
            logger.warning(f"Unknown callback event type: {event_type}")

    def remove_callback(self, event_type: str, callback: Callable):
        if event_type in self.callbacks and callback in self.callbacks[event_type]:
            self.callbacks[event_type].remove(callback)

    def _trigger_callbacks(self, event_type: str, *args, **kwargs):
        """Trigger all callbacks for a specific event type."""
        for callback in list(self.callbacks.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in {event_type} callback: {e}")

    def reset(self):
        """Discard any open stroke without committing."""
        self._stroke = None
        self.active = False

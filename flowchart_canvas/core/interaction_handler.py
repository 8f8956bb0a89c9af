"""
Interaction Handler Component
This module handles pointer and keyboard events on the diagram surface:
erase strokes, node creation and renaming, node dragging, edge drawing,
panning and zooming.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from enum import Enum
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..config import SurfaceConfig, get_surface_config
from ..models import NodeRole
from ..utils.geometry_utils import Point2D
from .diagram_geometry import DiagramGeometry
from .diagram_model import DiagramModel, Edge, Node
from .diagram_renderer import DiagramRenderer

logger = logging.getLogger(__name__)


class InteractionMode(Enum):
    """Interaction modes for the surface."""
    SELECT = "select"    # Create, rename, move, connect, pan and zoom
    ERASE = "erase"      # Pointer drags draw eraser strokes


class DragKind(Enum):
    """What an active primary-button drag is doing."""
    NONE = "none"
    PAN = "pan"
    MOVE_NODE = "move_node"
    CONNECT = "connect"
    STROKE = "stroke"


class InteractionHandler:
    """
    Routes matplotlib canvas events to the diagram model, the eraser and the
    renderer.

    The eraser is any object exposing set_active/start_stroke/add_point/
    end_stroke/stroke, normally an EraserEngine.
    """

    def __init__(self, figure: Figure, axes: Axes, model: DiagramModel,
                 geometry: DiagramGeometry, renderer: DiagramRenderer, eraser: Any,
                 config: Optional[SurfaceConfig] = None):
        """
        Initialize the interaction handler.

        Args:
            figure: Matplotlib figure instance
            axes: Matplotlib axes instance
            model: Diagram model edited by the user
            geometry: Geometry view used for hit tests
            renderer: Renderer refreshed after view changes
            eraser: Eraser engine receiving stroke samples
            config: Surface configuration
        """
        self.figure = figure
        self.canvas = figure.canvas
        self.ax = axes
        self.model = model
        self.geometry = geometry
        self.renderer = renderer
        self.eraser = eraser
        self.config = get_surface_config(config)

        # Interaction state
        self.mode = InteractionMode.SELECT
        self.drag_kind = DragKind.NONE
        self.drag_node_id: Optional[str] = None
        self.drag_offset: Optional[Point2D] = None
        self.connect_source_id: Optional[str] = None

        # Pan state, in display pixels
        self.pan_start: Optional[Tuple[float, float]] = None
        self.original_xlim: Optional[Tuple[float, float]] = None
        self.original_ylim: Optional[Tuple[float, float]] = None

        # Inline rename state
        self.rename_node_id: Optional[str] = None
        self.rename_original: str = ""
        self.rename_buffer: str = ""

        # Id counters for user-created entities
        self.node_counter: int = 0
        self.edge_counter: int = 0

        # Callbacks
        self.callbacks: Dict[str, List[Callable]] = {
            'mode_changed': [],
            'node_created': [],
            'edge_created': [],
            'rename_started': [],
            'rename_committed': [],
            'rename_cancelled': [],
            'view_changed': [],
        }

        self._connection_ids: List[int] = []
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup matplotlib event handlers."""
        self._connection_ids = [
            self.canvas.mpl_connect('button_press_event', self._on_mouse_press),
            self.canvas.mpl_connect('motion_notify_event', self._on_mouse_move),
            self.canvas.mpl_connect('button_release_event', self._on_mouse_release),
            self.canvas.mpl_connect('scroll_event', self._on_mouse_scroll),
            self.canvas.mpl_connect('key_press_event', self._on_key_press),
        ]

        # The default toolbar key bindings would fight with renaming
        manager = getattr(self.canvas, 'manager', None)
        handler_id = getattr(manager, 'key_press_handler_id', None)
        if handler_id is not None:
            self.canvas.mpl_disconnect(handler_id)

        logger.debug("Event handlers setup completed")

    def disconnect(self):
        """Detach from the canvas."""
        for cid in self._connection_ids:
            self.canvas.mpl_disconnect(cid)
        self._connection_ids = []
        logger.debug("Event handlers disconnected")

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def set_mode(self, mode: InteractionMode):
        """
        Set the interaction mode.

        Args:
            mode: New interaction mode
        """
        if self.mode == mode:
            return
        if self.rename_node_id is not None:
            self.cancel_rename()
        self._end_drag()
        self.mode = mode
        self.eraser.set_active(mode == InteractionMode.ERASE)
        self.renderer.update_stroke([])
        logger.info(f"Interaction mode changed to: {mode.value}")
        self._trigger_callbacks('mode_changed', mode)

    def toggle_erase_mode(self) -> InteractionMode:
        self.set_mode(InteractionMode.SELECT if self.mode == InteractionMode.ERASE else InteractionMode.ERASE)
        return self.mode

    def get_mouse_coordinates(self, event) -> Optional[Point2D]:
        """Mouse position in diagram space, or None outside the axes."""
        if event.inaxes != self.ax:
            return None
        if event.xdata is None or event.ydata is None:
            return None
        return Point2D(float(event.xdata), float(event.ydata))

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------

    def _on_mouse_press(self, event):
        """Handle mouse press events."""
        try:
            if event.button != 1:
                return
            coords = self.get_mouse_coordinates(event)
            if coords is None:
                return

            if getattr(event, 'dblclick', False):
                self._handle_double_click(coords)
                return

            if self.mode == InteractionMode.ERASE:
                if self.eraser.start_stroke(coords):
                    self.drag_kind = DragKind.STROKE
                    self.renderer.update_stroke(self.eraser.stroke)
                return

            node_id = self.geometry.node_at(coords)
            node = self.model.get_node(node_id) if node_id else None
            if node is not None and not node.pending_removal:
                if event.key == 'shift':
                    self.drag_kind = DragKind.CONNECT
                    self.connect_source_id = node.id
                else:
                    self.drag_kind = DragKind.MOVE_NODE
                    self.drag_node_id = node.id
                    self.drag_offset = coords - self.model.absolute_position(node.id)
                return

            self._start_pan(event)

        except Exception as e:
            logger.error(f"Error handling mouse press: {e}")

    def _on_mouse_move(self, event):
        """Handle mouse move events."""
        try:
            if self.drag_kind == DragKind.PAN:
                self._handle_pan(event)
                return

            coords = self.get_mouse_coordinates(event)
            if coords is None:
                return

            if self.drag_kind == DragKind.STROKE:
                self.eraser.add_point(coords)
                self.renderer.update_stroke(self.eraser.stroke)
            elif self.drag_kind == DragKind.MOVE_NODE:
                self._move_node(coords)

        except Exception as e:
            logger.error(f"Error handling mouse move: {e}")

    def _on_mouse_release(self, event):
        """Handle mouse release events."""
        try:
            if self.drag_kind == DragKind.STROKE:
                coords = self.get_mouse_coordinates(event)
                if coords is not None:
                    self.eraser.add_point(coords)
                self.eraser.end_stroke()
                self.renderer.update_stroke([])
            elif self.drag_kind == DragKind.CONNECT:
                coords = self.get_mouse_coordinates(event)
                target_id = self.geometry.node_at(coords) if coords is not None else None
                if target_id is not None:
                    self.create_edge(self.connect_source_id, target_id)

        except Exception as e:
            logger.error(f"Error handling mouse release: {e}")
        finally:
            self._end_drag()

    def _on_mouse_scroll(self, event):
        """Handle mouse scroll events for zooming."""
        try:
            coords = self.get_mouse_coordinates(event)
            if coords is not None:
                self.zoom_at_position(coords, event.button == 'up')
        except Exception as e:
            logger.error(f"Error handling mouse scroll: {e}")

    def _handle_double_click(self, coords: Point2D):
        if self.mode != InteractionMode.SELECT:
            return
        node_id = self.geometry.node_at(coords)
        if node_id is None:
            self.create_node(coords)
        else:
            self.start_rename(node_id)

    def _move_node(self, coords: Point2D):
        node_id = self.drag_node_id
        if not self.model.has_node(node_id):
            self._end_drag()
            return
        top_left = coords - self.drag_offset
        parent_id = self.model.parent_of(node_id)
        if parent_id is not None:
            top_left = top_left - self.model.absolute_position(parent_id)
        self.model.update_position(node_id, top_left)

    def _end_drag(self):
        self.drag_kind = DragKind.NONE
        self.drag_node_id = None
        self.drag_offset = None
        self.connect_source_id = None
        self.pan_start = None
        self.original_xlim = None
        self.original_ylim = None

    # ------------------------------------------------------------------
    # Pan and zoom
    # ------------------------------------------------------------------

    def _start_pan(self, event):
        """Start panning operation."""
        self.drag_kind = DragKind.PAN
        self.pan_start = (event.x, event.y)
        self.original_xlim = self.ax.get_xlim()
        self.original_ylim = self.ax.get_ylim()

    def _handle_pan(self, event):
        """Shift the view by the pointer travel since the press."""
        if self.pan_start is None or event.x is None or event.y is None:
            return
        bbox = self.ax.bbox
        if bbox.width == 0 or bbox.height == 0:
            return

        # Data units per pixel; negative on an inverted axis
        x_scale = (self.original_xlim[1] - self.original_xlim[0]) / bbox.width
        y_scale = (self.original_ylim[1] - self.original_ylim[0]) / bbox.height
        dx = (event.x - self.pan_start[0]) * x_scale
        dy = (event.y - self.pan_start[1]) * y_scale

        self.ax.set_xlim(self.original_xlim[0] - dx, self.original_xlim[1] - dx)
        self.ax.set_ylim(self.original_ylim[0] - dy, self.original_ylim[1] - dy)
        self.canvas.draw_idle()
        self._trigger_callbacks('view_changed')

    def zoom_at_position(self, coords: Point2D, zoom_in: bool) -> bool:
        """
        Zoom around a point, keeping that point fixed on screen.

        Args:
            coords: Coordinates to zoom at
            zoom_in: True to zoom in, False to zoom out

        Returns:
            True if the view changed
        """
        xlim = self.ax.get_xlim()
        ylim = self.ax.get_ylim()
        scale_factor = self.config.zoom_in_factor if zoom_in else self.config.zoom_out_factor

        new_span = abs(xlim[1] - xlim[0]) * scale_factor
        if not self.config.min_view_span <= new_span <= self.config.max_view_span:
            return False

        self.ax.set_xlim(coords.x - (coords.x - xlim[0]) * scale_factor,
                         coords.x + (xlim[1] - coords.x) * scale_factor)
        self.ax.set_ylim(coords.y - (coords.y - ylim[0]) * scale_factor,
                         coords.y + (ylim[1] - coords.y) * scale_factor)
        self.canvas.draw_idle()
        self._trigger_callbacks('view_changed')
        return True

    def reset_view(self):
        """Reset view to show the entire diagram."""
        self.renderer.reset_view()
        self._trigger_callbacks('view_changed')

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def _on_key_press(self, event):
        """Handle key press events."""
        try:
            key = event.key
            if key is None:
                return

            if self.rename_node_id is not None:
                self._handle_rename_key(key)
                return

            if key == 'e':
                self.toggle_erase_mode()
            elif key == 'escape':
                self.set_mode(InteractionMode.SELECT)
            elif key == 't':
                self.renderer.toggle_theme()
            elif key == 'r':
                self.reset_view()

        except Exception as e:
            logger.error(f"Error handling key press: {e}")

    def _handle_rename_key(self, key: str):
        if key == 'enter':
            self.commit_rename()
        elif key == 'escape':
            self.cancel_rename()
        elif key == 'backspace':
            self._set_rename_buffer(self.rename_buffer[:-1])
        elif len(key) == 1:
            self._set_rename_buffer(self.rename_buffer + key)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def create_node(self, coords: Point2D) -> Optional[str]:
        """
        Create a process node with its top-left corner at coords.

        Returns:
            The new node id, or None if the model rejected it
        """
        if self.model.is_empty():
            self.node_counter = 0
        n = self.node_counter
        while self.model.has_node(f"node-{n}"):
            n += 1

        node = Node(id=f"node-{n}", role=NodeRole.PROCESS, position=coords, label=f"Node {n + 1}")
        result = self.model.insert_nodes([node])
        if not result:
            logger.warning(f"Node creation rejected: {result.error}")
            return None

        self.node_counter = n + 1
        logger.info(f"Created {node.id} at ({coords.x:.1f}, {coords.y:.1f})")
        self._trigger_callbacks('node_created', node.id)
        return node.id

    def create_edge(self, source_id: str, target_id: str) -> Optional[str]:
        """Connect two distinct nodes. Returns the new edge id or None."""
        if source_id is None or source_id == target_id:
            return None
        if not self.model.edges:
            self.edge_counter = 0
        n = self.edge_counter
        while self.model.has_edge(f"edge-{n}"):
            n += 1

        edge = Edge(id=f"edge-{n}", source=source_id, target=target_id)
        result = self.model.insert_edges([edge])
        if not result:
            logger.warning(f"Edge creation rejected: {result.error}")
            return None

        self.edge_counter = n + 1
        logger.info(f"Connected {source_id} -> {target_id} as {edge.id}")
        self._trigger_callbacks('edge_created', edge.id)
        return edge.id

    def start_rename(self, node_id: str) -> bool:
        """Begin inline editing of a node label. Nodes fading out cannot be renamed."""
        node = self.model.get_node(node_id)
        if node is None or node.pending_removal:
            return False
        if self.rename_node_id is not None:
            self.cancel_rename()

        self.rename_node_id = node_id
        self.rename_original = node.label
        self.rename_buffer = node.label
        self._trigger_callbacks('rename_started', node_id)
        return True

    def _set_rename_buffer(self, text: str):
        self.rename_buffer = text
        # Live preview of the draft
        self.model.update_label(self.rename_node_id, text)

    def commit_rename(self) -> bool:
        """
        Save the draft label. A blank draft keeps the previous label.

        Returns:
            True if a new label was stored
        """
        node_id = self.rename_node_id
        if node_id is None:
            return False
        text = self.rename_buffer.strip()
        self.rename_node_id = None

        if not self.model.has_node(node_id):
            return False
        if not text:
            self.model.update_label(node_id, self.rename_original)
            self._trigger_callbacks('rename_cancelled', node_id)
            return False

        self.model.update_label(node_id, text)
        self._trigger_callbacks('rename_committed', node_id, text)
        return True

    def cancel_rename(self):
        """Discard the draft and restore the previous label."""
        node_id = self.rename_node_id
        if node_id is None:
            return
        self.rename_node_id = None
        if self.model.has_node(node_id):
            self.model.update_label(node_id, self.rename_original)
        self._trigger_callbacks('rename_cancelled', node_id)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for a specific event type.

        Args:
            event_type: Type of event ('mode_changed', 'node_created', etc.)
            callback: Callback function to call
        """
        if event_type in self.callbacks:
            self.callbacks[event_type].append(callback)
        else:
            logger.warning(f"Unknown event type: {event_type}")

    def remove_callback(self, event_type: str, callback: Callable):
        if event_type in self.callbacks and callback in self.callbacks[event_type]:
            self.callbacks[event_type].remove(callback)

    def _trigger_callbacks(self, event_type: str, *args, **kwargs):
        """Trigger all callbacks for a specific event type."""
        for callback in list(self.callbacks.get(event_type, [])):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in callback for {event_type}: {e}")

    def get_interaction_state(self) -> Dict[str, Any]:
        """
        Get current interaction state.

        Returns:
            Dictionary containing interaction state information
        """
        return {
            'mode': self.mode.value,
            'drag': self.drag_kind.value,
            'renaming': self.rename_node_id,
            'xlim': tuple(self.ax.get_xlim()),
            'ylim': tuple(self.ax.get_ylim()),
        }

"""
Diagram Renderer Component
This module draws the diagram model onto a matplotlib axes: group frames,
nodes, labelled edges with arrowheads, the live eraser stroke and the reveal
progress caption. Entities flagged for removal are drawn translucent.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import FancyArrowPatch, FancyBboxPatch, Polygon, Rectangle as RectanglePatch

from ..config import SurfaceConfig, get_surface_config, get_visualization_config
from ..models import NodeRole
from ..utils.geometry_utils import Point2D
from .diagram_geometry import DiagramGeometry
from .diagram_model import DiagramModel, Edge, Node

logger = logging.getLogger(__name__)


class DiagramRenderer:
    """
    Keeps one set of matplotlib artists per model entity.
    Every call to render() rebuilds the entity artists from the model, so the
    picture always matches the model after any mutation.
    """

    def __init__(self, figure: Figure, axes: Axes, model: DiagramModel,
                 geometry: Optional[DiagramGeometry] = None,
                 config: Optional[SurfaceConfig] = None):
        """
        Initialize the diagram renderer.

        Args:
            figure: Matplotlib figure instance
            axes: Matplotlib axes instance
            model: Diagram model to draw
            geometry: Geometry view (built from model if omitted)
            config: Surface configuration
        """
        self.figure = figure
        self.ax = axes
        self.model = model
        self.surface_config = get_surface_config(config)
        self.geometry = geometry or DiagramGeometry(model, self.surface_config)
        self.config = get_visualization_config(self.surface_config.theme)

        # Artist storage
        # (kind, id) -> artists; node and edge ids may coincide
        self.entity_artists: Dict[Tuple[str, str], List[Any]] = {}
        self.stroke_line = None
        self.progress_text = None

        # State tracking
        self.render_count: int = 0
        self._view_fitted: bool = False

        self._setup_display()

    @property
    def theme(self) -> str:
        return self.config['theme']

    def _setup_display(self):
        """Set up axes appearance and the persistent overlay artists."""
        colors = self.config['colors']
        self.figure.set_facecolor(colors['background'])
        self.ax.set_facecolor(colors['background'])
        self.ax.set_aspect('equal', adjustable='datalim')
        self.ax.tick_params(colors=colors['grid'], labelsize=7)
        for spine in self.ax.spines.values():
            spine.set_color(colors['panel_border'])

        grid_config = self.config['grid']
        self.ax.grid(grid_config['show_grid'],
                     color=colors['grid'],
                     alpha=grid_config['grid_alpha'],
                     linestyle=grid_config['grid_linestyle'],
                     linewidth=grid_config['grid_linewidth'])

        stroke_config = self.config['stroke']
        if self.stroke_line is None:
            self.stroke_line, = self.ax.plot([], [],
                                             linewidth=stroke_config['linewidth'],
                                             linestyle=stroke_config['linestyle'],
                                             zorder=stroke_config['z_order'])
        self.stroke_line.set_color(colors['stroke'])
        self.stroke_line.set_alpha(stroke_config['alpha'])

        progress_config = self.config['progress']
        if self.progress_text is None:
            self.progress_text = self.ax.text(*progress_config['position'], "",
                                              transform=self.ax.transAxes,
                                              ha='left', va='top',
                                              fontsize=progress_config['font_size'],
                                              zorder=progress_config['z_order'],
                                              visible=False)
        self.progress_text.set_color(colors['text'])
        self.progress_text.set_bbox(dict(boxstyle='round,pad=0.3',
                                         facecolor=colors['panel_face'],
                                         edgecolor=colors['panel_border']))

        if not self._view_fitted:
            self.reset_view()

    # ------------------------------------------------------------------
    # Entity drawing
    # ------------------------------------------------------------------

    def render(self):
        """Redraw every node and edge from the current model."""
        try:
            self._clear_entity_artists()

            # Groups first so member nodes sit on top
            nodes = sorted(self.model.nodes, key=lambda n: n.role != NodeRole.GROUP)
            for node in nodes:
                self.entity_artists[('node', node.id)] = self._draw_node(node)

            for edge in self.model.edges:
                if self.model.has_node(edge.source) and self.model.has_node(edge.target):
                    self.entity_artists[('edge', edge.id)] = self._draw_edge(edge)

            self.render_count += 1
            self.update_canvas()

        except Exception as e:
            logger.error(f"Error rendering diagram: {e}")

    def _draw_node(self, node: Node) -> List[Any]:
        colors = self.config['colors']
        node_config = self.config['nodes']
        rect = self.geometry.node_rect(node.id)
        accent = self.config['roles'].get(node.role.value, colors['node_border'])
        alpha = self.surface_config.pending_removal_alpha if node.pending_removal else 1.0
        artists: List[Any] = []

        if node.role == NodeRole.GROUP:
            frame = RectanglePatch((rect.x, rect.y), rect.width, rect.height,
                                   facecolor=accent,
                                   edgecolor=accent,
                                   linewidth=node_config['border_linewidth'],
                                   linestyle=node_config['group_linestyle'],
                                   zorder=node_config['z_order_group'])
            frame.set_alpha(node_config['group_fill_alpha'] * alpha)
            self.ax.add_patch(frame)
            artists.append(frame)
            if node.label:
                artists.append(self.ax.text(rect.x + 6, rect.y + 6, node.label,
                                            ha='left', va='top',
                                            fontsize=node_config['group_label_font_size'],
                                            color=colors['text'], alpha=alpha,
                                            zorder=node_config['z_order_group'],
                                            clip_on=True))
            return artists

        if node.role == NodeRole.DECISION:
            center = rect.center
            body = Polygon([(center.x, rect.y), (rect.right, center.y),
                            (center.x, rect.bottom), (rect.x, center.y)],
                           closed=True,
                           facecolor=colors['node_face'],
                           edgecolor=accent,
                           linewidth=node_config['accent_linewidth'],
                           zorder=node_config['z_order_node'])
        else:
            rounding = min(node_config['corner_radius'], rect.width / 2, rect.height / 2)
            boxstyle = f"round,pad=0,rounding_size={rounding}" if rounding > 0 else "square,pad=0"
            body = FancyBboxPatch((rect.x, rect.y), rect.width, rect.height,
                                  boxstyle=boxstyle,
                                  facecolor=colors['node_face'],
                                  edgecolor=accent,
                                  linewidth=node_config['accent_linewidth']
                                  if node.role in (NodeRole.START, NodeRole.END)
                                  else node_config['border_linewidth'],
                                  zorder=node_config['z_order_node'])
        body.set_alpha(alpha)
        self.ax.add_patch(body)
        artists.append(body)

        if node.label:
            center = rect.center
            artists.append(self.ax.text(center.x, center.y, node.label,
                                        ha='center', va='center',
                                        fontsize=node_config['label_font_size'],
                                        color=colors['text'], alpha=alpha,
                                        zorder=node_config['z_order_label'],
                                        clip_on=True))
        return artists

    def _draw_edge(self, edge: Edge) -> List[Any]:
        colors = self.config['colors']
        edge_config = self.config['edges']
        start, end = self.geometry.edge_path(edge)
        alpha = self.surface_config.pending_removal_alpha if edge.pending_removal else edge_config['alpha']

        arrow = FancyArrowPatch(start.to_tuple(), end.to_tuple(),
                                arrowstyle=edge_config['arrow_style'],
                                mutation_scale=edge_config['arrow_size'],
                                color=colors['edge'],
                                linewidth=edge_config['linewidth'],
                                shrinkA=0, shrinkB=0,
                                zorder=edge_config['z_order'])
        arrow.set_alpha(alpha)
        self.ax.add_patch(arrow)
        artists: List[Any] = [arrow]

        if edge.label:
            middle = (start + end) * 0.5
            artists.append(self.ax.text(middle.x, middle.y, edge.label,
                                        ha='center', va='center',
                                        fontsize=edge_config['label_font_size'],
                                        color=colors['text'], alpha=alpha,
                                        bbox=dict(boxstyle='round,pad=0.2',
                                                  facecolor=colors['edge_label_face'],
                                                  edgecolor='none', alpha=alpha),
                                        zorder=edge_config['z_order'],
                                        clip_on=True))
        return artists

    def _clear_entity_artists(self):
        for artists in self.entity_artists.values():
            for artist in artists:
                try:
                    artist.remove()
                except ValueError:
                    logger.debug("Artist already detached from axes")
        self.entity_artists = {}

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def update_stroke(self, points: Sequence[Point2D]):
        """Show the eraser stroke polyline; an empty sequence hides it."""
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        self.stroke_line.set_data(xs, ys)
        self.update_canvas()

    def update_progress(self, progress: Dict[str, Any]):
        """Show the reveal caption while a reveal is running."""
        state = progress.get('state')
        if state in ('revealing_nodes', 'revealing_edges'):
            self.progress_text.set_text(
                f"Revealing: {progress['nodes_revealed']}/{progress['node_total']} nodes, "
                f"{progress['edges_revealed']}/{progress['edge_total']} edges "
                f"({progress['percent']}%)"
            )
            self.progress_text.set_visible(True)
        else:
            self.progress_text.set_visible(False)
        self.update_canvas()

    # ------------------------------------------------------------------
    # Theme and view
    # ------------------------------------------------------------------

    def set_theme(self, theme: str):
        """Switch the colour theme and redraw."""
        self.config = get_visualization_config(theme)
        self._setup_display()
        self.render()
        logger.info(f"Theme set to {self.theme}")

    def toggle_theme(self) -> str:
        self.set_theme('dark' if self.theme == 'light' else 'light')
        return self.theme

    def fit_view(self) -> bool:
        """
        Fit the axes limits to the diagram content.

        Returns:
            True if there was content to fit
        """
        bounds = self.geometry.content_bounds()
        if bounds is None:
            return False

        padding = self.config['grid']['view_padding']
        half_span = max(bounds.width, bounds.height, self.surface_config.min_view_span) / 2 + padding
        center = bounds.center
        self.ax.set_xlim(center.x - half_span, center.x + half_span)
        # Diagram space grows downwards
        self.ax.set_ylim(center.y + half_span, center.y - half_span)
        self._view_fitted = True
        self.update_canvas()
        return True

    def reset_view(self):
        """Fit to the content, or show a default window for an empty diagram."""
        if self.fit_view():
            return
        span = self.surface_config.default_node_width * 4
        self.ax.set_xlim(-span / 2, span / 2)
        self.ax.set_ylim(span / 2, -span / 2)
        self.update_canvas()

    def update_canvas(self):
        """Request a redraw of the canvas."""
        if self.figure.canvas is not None:
            self.figure.canvas.draw_idle()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_entity_alpha(self, kind: str, entity_id: str) -> Optional[float]:
        """Alpha of the main artist drawn for a 'node' or 'edge', None if not drawn."""
        artists = self.entity_artists.get((kind, entity_id))
        if not artists:
            return None
        alpha = artists[0].get_alpha()
        return 1.0 if alpha is None else alpha

    def get_render_info(self) -> Dict[str, Any]:
        return {
            'theme': self.theme,
            'entities_drawn': len(self.entity_artists),
            'render_count': self.render_count,
            'stroke_points': len(self.stroke_line.get_xdata()),
            'progress_visible': self.progress_text.get_visible(),
        }

    def cleanup(self):
        """Remove every artist this renderer created."""
        self._clear_entity_artists()
        self.stroke_line.set_data([], [])
        self.progress_text.set_visible(False)
        self.update_canvas()

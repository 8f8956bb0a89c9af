"""
Diagram Surface
Composes the model, geometry view, reveal scheduler, eraser, renderer and
interaction handler for one diagram shown on one matplotlib axes.
"""

import logging
from typing import Any, Callable, Dict, Optional, Union

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .business import EraserEngine, RevealScheduler, RevealState, TimerFactory
from .config import SurfaceConfig, get_surface_config
from .core import (
    DiagramGeometry,
    DiagramModel,
    DiagramRenderer,
    InteractionHandler,
    InteractionMode,
    RemovalResult,
)
from .models import GraphSpec
from .utils import ErrorHandlingSystem

logger = logging.getLogger(__name__)


class DiagramSurface:
    """
    One interactive diagram instance.

    Components are wired through their callback registries: model changes
    re-render, reveal progress updates the caption, and the first data-bearing
    reveal step fits the view.
    """

    def __init__(self, figure: Optional[Figure] = None, axes: Optional[Axes] = None,
                 config: Optional[Union[SurfaceConfig, Dict[str, Any]]] = None,
                 timer_factory: Optional[TimerFactory] = None,
                 error_handler: Optional[ErrorHandlingSystem] = None):
        """
        Initialize the diagram surface.

        Args:
            figure: Matplotlib figure (a new pyplot figure if omitted)
            axes: Axes to draw into (a new subplot of figure if omitted)
            config: SurfaceConfig or overrides for it
            timer_factory: Timer source for the reveal; defaults to the canvas timers
            error_handler: Shared error recorder
        """
        if figure is None:
            figure, axes = plt.subplots()
        elif axes is None:
            axes = figure.add_subplot(111)

        self.figure = figure
        self.ax = axes
        self.config = get_surface_config(config)
        self.error_handler = error_handler or ErrorHandlingSystem()

        if timer_factory is None:
            timer_factory = lambda interval_ms: self.figure.canvas.new_timer(interval=interval_ms)

        self.model = DiagramModel()
        self.geometry = DiagramGeometry(self.model, self.config)
        self.scheduler = RevealScheduler(self.model, timer_factory, self.config, self.error_handler)
        self.eraser = EraserEngine(self.model, self.geometry, self.config)
        self.renderer = DiagramRenderer(self.figure, self.ax, self.model, self.geometry, self.config)
        self.interaction = InteractionHandler(self.figure, self.ax, self.model, self.geometry,
                                              self.renderer, self.eraser, self.config)

        self._torn_down = False
        self._setup_component_interactions()
        logger.info("Diagram surface initialized")

    def _setup_component_interactions(self):
        """Wire component callbacks."""
        for event_type in ('nodes_inserted', 'edges_inserted', 'pending_changed',
                           'removal_committed', 'node_updated', 'edge_updated', 'cleared'):
            self.model.add_callback(event_type, self._on_model_changed)

        self.scheduler.add_callback('progress_updated', self.renderer.update_progress)
        self.scheduler.add_callback('progress_updated', self._on_reveal_progress)
        self.scheduler.add_callback('reveal_completed', self.renderer.reset_view)

    def _on_model_changed(self, *args):
        self.renderer.render()

    def _on_reveal_progress(self, progress: Dict[str, Any]):
        # Frame the diagram once the first node shows up
        if progress['nodes_revealed'] == 1 and progress['edges_revealed'] == 0:
            self.renderer.reset_view()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def load_graph(self, graph: Union[GraphSpec, Dict[str, Any]]) -> bool:
        """
        Reveal a generated graph. A graph equal to the last one loaded is ignored.

        Returns:
            True if a reveal was started
        """
        if self._torn_down:
            logger.warning("load_graph called on a torn down surface")
            return False
        return self.scheduler.set_target(graph)

    def on_reveal_complete(self, callback: Callable[[], None]):
        """Register a listener fired once per completed reveal."""
        self.scheduler.add_callback('reveal_completed', callback)

    def on_removal_committed(self, callback: Callable[[RemovalResult], None]):
        """Register a listener fired with the ids removed by each eraser commit."""
        self.model.add_callback('removal_committed', callback)

    def set_erase_mode(self, enabled: bool):
        self.interaction.set_mode(InteractionMode.ERASE if enabled else InteractionMode.SELECT)

    def set_theme(self, theme: str):
        self.renderer.set_theme(theme)

    def to_graph(self) -> GraphSpec:
        """Current diagram in the input graph shape."""
        return self.model.to_graph()

    @property
    def is_revealing(self) -> bool:
        return self.scheduler.state in (RevealState.REVEALING_NODES, RevealState.REVEALING_EDGES)

    def get_status(self) -> Dict[str, Any]:
        """
        Get a combined status snapshot.

        Returns:
            Dictionary with model, reveal, interaction and error information
        """
        return {
            'model': self.model.get_statistics(),
            'reveal': self.scheduler.get_progress(),
            'reveal_statistics': self.scheduler.get_statistics(),
            'interaction': self.interaction.get_interaction_state(),
            'render': self.renderer.get_render_info(),
            'errors': self.error_handler.get_error_statistics(),
        }

    def teardown(self):
        """Stop timers, drop listeners and detach from the canvas."""
        if self._torn_down:
            return
        self.scheduler.teardown()
        self.eraser.reset()
        self.renderer.cleanup()
        self.interaction.disconnect()
        for listeners in self.model.callbacks.values():
            listeners.clear()
        self._torn_down = True
        logger.info("Diagram surface torn down")

"""
Reveal Scheduler Component
This module animates a target graph onto the diagram model: nodes appear one
at a time, then edges snap in, each step driven by a cancellable single-shot
timer.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Union
from enum import Enum

from ..config import SurfaceConfig, get_surface_config
from ..core.diagram_model import DiagramModel
from ..models import GraphSpec
from ..utils.error_handling import ErrorHandlingSystem, OperationResult

logger = logging.getLogger(__name__)

# Builds a single-use timer for the given interval in milliseconds. The timer
# follows matplotlib's TimerBase interface (add_callback / start / stop /
# single_shot), e.g. ``figure.canvas.new_timer``.
TimerFactory = Callable[[int], Any]


class RevealState(Enum):
    """Reveal animation states."""
    IDLE = "idle"
    REVEALING_NODES = "revealing_nodes"
    REVEALING_EDGES = "revealing_edges"
    COMPLETE = "complete"


class RevealScheduler:
    """
    Drives a DiagramModel from empty to fully populated through a node phase
    followed by an edge phase.
    """

    def __init__(self, model: DiagramModel, timer_factory: TimerFactory,
                 config: Optional[SurfaceConfig] = None,
                 error_handler: Optional[ErrorHandlingSystem] = None):
        """
        Initialize the reveal scheduler.

        Args:
            model: Diagram model to populate
            timer_factory: Callable returning a fresh timer for an interval in ms
            config: Surface configuration (delays)
            error_handler: Optional recorder for rejected insertions
        """
        self.model = model
        self.timer_factory = timer_factory
        self.config = get_surface_config(config)
        self.error_handler = error_handler

        # Reveal state
        self.state: RevealState = RevealState.IDLE
        self._target: Optional[GraphSpec] = None
        self._last_fingerprint: Optional[str] = None
        self._node_index: int = 0
        self._edge_index: int = 0

        # Pending deferred step; stale ticks are recognised by generation
        self._timer: Optional[Any] = None
        self._generation: int = 0

        # Statistics
        self.reveal_count: int = 0
        self.aborted_count: int = 0
        self.rejected_count: int = 0

        # Callbacks
        self.callbacks: Dict[str, List[Callable]] = {
            'state_changed': [],
            'progress_updated': [],
            'reveal_completed': [],
            'insertion_rejected': [],
        }

    @property
    def is_running(self) -> bool:
        return self.state in (RevealState.REVEALING_NODES, RevealState.REVEALING_EDGES)

    def set_target(self, graph: Union[GraphSpec, Dict[str, Any]]) -> bool:
        """
        Supply a new target graph.

        A graph structurally equal to the last one supplied is ignored. Any
        other graph aborts a running reveal, clears the model and starts over.

        Args:
            graph: GraphSpec or a dictionary in the same shape

        Returns:
            True if a reveal was started
        """
        if not isinstance(graph, GraphSpec):
            graph = GraphSpec.model_validate(graph)

        fingerprint = graph.fingerprint()
        if fingerprint == self._last_fingerprint:
            logger.debug("Target graph unchanged; reveal not restarted")
            return False

        self._last_fingerprint = fingerprint
        self._start(graph)
        return True

    def _start(self, graph: GraphSpec):
        if self.is_running:
            self.aborted_count += 1
            logger.info("New target graph received mid-reveal; restarting")

        self._cancel_timer()
        self._generation += 1
        self._target = graph
        self._node_index = 0
        self._edge_index = 0
        self.model.clear()

        logger.info(f"Revealing graph with {len(graph.nodes)} node(s) and {len(graph.edges)} edge(s)")
        self._set_state(RevealState.REVEALING_NODES)
        self._trigger_callbacks('progress_updated', self.get_progress())
        self._advance()

    def _advance(self):
        """Schedule the next insertion or finish the run."""
        target = self._target
        if self._node_index < len(target.nodes):
            self._schedule(self.config.node_delay_ms, self._reveal_next_node)
        elif self._edge_index < len(target.edges):
            self._set_state(RevealState.REVEALING_EDGES)
            self._schedule(self.config.edge_delay_ms, self._reveal_next_edge)
        else:
            self._complete()

    def _schedule(self, delay_ms: int, step: Callable[[], None]):
        timer = self.timer_factory(delay_ms)
        timer.single_shot = True
        timer.add_callback(self._on_timer, self._generation, step)
        self._timer = timer
        timer.start()

    def _on_timer(self, generation: int, step: Callable[[], None]):
        if generation != self._generation or not self.is_running:
            logger.debug("Discarding stale reveal tick")
            return
        self._timer = None
        step()

    def _reveal_next_node(self):
        node = self._target.nodes[self._node_index]
        self._node_index += 1
        result = self.model.insert_nodes([node])
        if not result:
            self._report_rejection('insert_node', node.id, result)
        self._trigger_callbacks('progress_updated', self.get_progress())
        self._advance()

    def _reveal_next_edge(self):
        edge = self._target.edges[self._edge_index]
        self._edge_index += 1
        result = self.model.insert_edges([edge])
        if not result:
            self._report_rejection('insert_edge', edge.id, result)
        self._trigger_callbacks('progress_updated', self.get_progress())
        self._advance()

    def _report_rejection(self, operation: str, entity_id: str, result: OperationResult):
        self.rejected_count += 1
        if self.error_handler is not None:
            self.error_handler.handle_error(result.error, 'RevealScheduler', operation)
        else:
            logger.warning(f"Reveal skipped {entity_id}: {result.error}")
        self._trigger_callbacks('insertion_rejected', entity_id, result.error)

    def _complete(self):
        self._timer = None
        self.reveal_count += 1
        self._set_state(RevealState.COMPLETE)
        logger.info("Reveal complete")
        self._trigger_callbacks('progress_updated', self.get_progress())
        self._trigger_callbacks('reveal_completed')

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def cancel(self):
        """Abort a running reveal. The model keeps whatever was already revealed."""
        if not self.is_running:
            return
        self._cancel_timer()
        self._generation += 1
        self.aborted_count += 1
        # Allow the same graph to be revealed again after an abort
        self._last_fingerprint = None
        self._set_state(RevealState.IDLE)
        logger.info("Reveal cancelled")

    def teardown(self):
        """Cancel any pending step and drop all callbacks."""
        self.cancel()
        self._generation += 1
        for listeners in self.callbacks.values():
            listeners.clear()
        logger.debug("RevealScheduler torn down")

    def _set_state(self, state: RevealState):
        if self.state != state:
            self.state = state
            self._trigger_callbacks('state_changed', state)

    def get_progress(self) -> Dict[str, Any]:
        """
        Get reveal progress.

        Returns:
            Dictionary with state, counters and percentage
        """
        node_total = len(self._target.nodes) if self._target else 0
        edge_total = len(self._target.edges) if self._target else 0
        total = node_total + edge_total
        done = self._node_index + self._edge_index
        percent = round(done / total * 100) if total else (100 if self.state == RevealState.COMPLETE else 0)
        return {
            'state': self.state.value,
            'nodes_revealed': self._node_index,
            'node_total': node_total,
            'edges_revealed': self._edge_index,
            'edge_total': edge_total,
            'percent': percent,
        }

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'reveal_count': self.reveal_count,
            'aborted_count': self.aborted_count,
            'rejected_count': self.rejected_count,
            'current_state': self.state.value,
        }

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for reveal events.

        Args:
            event_type: Type of event ('reveal_completed', 'progress_updated', etc.)
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

"""Tests for RevealScheduler timing, restarts and cancellation on a manual clock."""

import pytest

from flowchart_canvas.business.reveal_scheduler import RevealScheduler, RevealState
from flowchart_canvas.config import SurfaceConfig
from flowchart_canvas.utils.error_handling import ErrorCategory, ErrorHandlingSystem
from tests.helpers import edge, node

GRAPH = {
    "nodes": [node("A", 0, 0), node("B", 0, 100)],
    "edges": [edge("A-B", "A", "B")],
}


@pytest.fixture
def scheduler(model, clock):
    s = RevealScheduler(model, clock)
    yield s
    s.teardown()


def _ids(entities):
    return [e.id for e in entities]


class TestTimeline:

    def test_node_then_edge_timeline(self, scheduler, model, clock):
        assert scheduler.set_target(GRAPH)
        assert model.is_empty()

        clock.advance(199)
        assert model.is_empty()

        clock.advance(1)  # t=200
        assert _ids(model.nodes) == ["A"]

        clock.advance(200)  # t=400
        assert _ids(model.nodes) == ["A", "B"]
        assert model.edges == []

        clock.advance(49)  # t=449
        assert model.edges == []

        clock.advance(1)  # t=450
        assert _ids(model.edges) == ["A-B"]
        assert scheduler.state == RevealState.COMPLETE

    def test_completion_fires_once(self, scheduler, clock):
        completed = []
        scheduler.add_callback('reveal_completed', lambda: completed.append(clock.now))
        scheduler.set_target(GRAPH)
        clock.advance(10_000)
        assert completed == [450]

    def test_all_nodes_before_any_edge(self, scheduler, model, clock):
        counts = []
        model.add_callback('edges_inserted', lambda ids: counts.append(len(model.nodes)))
        graph = {
            "nodes": [node(f"n{i}", 0, i * 60) for i in range(4)],
            "edges": [edge(f"e{i}", f"n{i}", f"n{i + 1}") for i in range(3)],
        }
        scheduler.set_target(graph)
        clock.advance(10_000)
        assert counts == [4, 4, 4]

    def test_state_transitions(self, scheduler, clock):
        states = []
        scheduler.add_callback('state_changed', states.append)
        scheduler.set_target(GRAPH)
        clock.advance(1_000)
        assert states == [RevealState.REVEALING_NODES, RevealState.REVEALING_EDGES, RevealState.COMPLETE]

    def test_progress(self, scheduler, clock):
        scheduler.set_target(GRAPH)
        clock.advance(200)
        progress = scheduler.get_progress()
        assert progress['nodes_revealed'] == 1
        assert progress['node_total'] == 2
        assert progress['edge_total'] == 1
        assert progress['percent'] == 33

    def test_configured_delays(self, model, clock):
        scheduler = RevealScheduler(model, clock, SurfaceConfig(node_delay_ms=10, edge_delay_ms=5))
        scheduler.set_target(GRAPH)
        clock.advance(20)
        assert len(model.nodes) == 2 and model.edges == []
        clock.advance(5)
        assert len(model.edges) == 1

    def test_empty_graph_completes_immediately(self, scheduler, model, clock):
        completed = []
        scheduler.add_callback('reveal_completed', lambda: completed.append(True))
        scheduler.set_target({"nodes": [], "edges": []})
        assert completed == [True]
        assert scheduler.state == RevealState.COMPLETE
        assert clock.pending == 0


class TestRestart:

    def test_equal_graph_is_ignored(self, scheduler, model, clock):
        scheduler.set_target(GRAPH)
        clock.advance(200)
        assert not scheduler.set_target(dict(GRAPH))
        assert _ids(model.nodes) == ["A"]
        clock.advance(250)
        assert scheduler.state == RevealState.COMPLETE

    def test_new_graph_mid_reveal_restarts(self, scheduler, model, clock):
        scheduler.set_target(GRAPH)
        clock.advance(250)
        assert _ids(model.nodes) == ["A"]

        other = {"nodes": [node("X"), node("Y", 0, 100)], "edges": []}
        assert scheduler.set_target(other)
        assert model.is_empty()

        clock.advance(10_000)
        assert _ids(model.nodes) == ["X", "Y"]
        assert model.edges == []
        assert scheduler.aborted_count == 1

    def test_stale_tick_is_discarded(self, scheduler, model, clock):
        scheduler.set_target(GRAPH)
        stale_timer = clock.created[-1]
        scheduler.set_target({"nodes": [node("X")], "edges": []})

        stale_timer.fire()
        assert model.is_empty()

        clock.advance(200)
        assert _ids(model.nodes) == ["X"]

    def test_restart_stops_pending_timer(self, scheduler, clock):
        scheduler.set_target(GRAPH)
        first = clock.created[-1]
        scheduler.set_target({"nodes": [node("X")], "edges": []})
        assert first.stopped
        assert clock.pending == 1


class TestRejectionAndCancel:

    def test_bad_edge_is_reported_and_reveal_continues(self, model, clock):
        errors = ErrorHandlingSystem()
        scheduler = RevealScheduler(model, clock, error_handler=errors)
        rejected = []
        scheduler.add_callback('insertion_rejected', lambda entity_id, error: rejected.append(entity_id))

        scheduler.set_target({
            "nodes": [node("A")],
            "edges": [edge("bad", "A", "ghost"), edge("loop", "A", "A")],
        })
        clock.advance(10_000)

        assert rejected == ["bad"]
        assert _ids(model.edges) == ["loop"]
        assert scheduler.state == RevealState.COMPLETE
        record = errors.get_recent_errors()[-1]
        assert record.category == ErrorCategory.MALFORMED_GRAPH
        assert record.component == "RevealScheduler"

    def test_cancel_keeps_partial_model(self, scheduler, model, clock):
        scheduler.set_target(GRAPH)
        clock.advance(200)
        scheduler.cancel()
        clock.advance(10_000)
        assert _ids(model.nodes) == ["A"]
        assert scheduler.state == RevealState.IDLE

    def test_same_graph_can_be_replayed_after_cancel(self, scheduler, model, clock):
        scheduler.set_target(GRAPH)
        clock.advance(200)
        scheduler.cancel()
        assert scheduler.set_target(GRAPH)
        clock.advance(450)
        assert _ids(model.nodes) == ["A", "B"]

    def test_teardown_stops_everything(self, model, clock):
        scheduler = RevealScheduler(model, clock)
        completed = []
        scheduler.add_callback('reveal_completed', lambda: completed.append(True))
        scheduler.set_target(GRAPH)
        scheduler.teardown()
        clock.advance(10_000)
        assert model.is_empty()
        assert completed == []

    def test_accepts_react_flow_payload(self, scheduler, model, clock):
        scheduler.set_target({
            "nodes": [{"id": "s", "type": "input", "position": {"x": 0, "y": 0}, "data": {"label": "Go"}}],
            "edges": [],
        })
        clock.advance(200)
        assert model.get_node("s").label == "Go"

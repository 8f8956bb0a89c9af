"""Shared fixtures: headless matplotlib canvas, manual clock, fresh model and surface."""

import os

import matplotlib

matplotlib.use("Agg")

import pytest
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from flowchart_canvas import DiagramModel, DiagramSurface, SurfaceConfig
from tests.helpers import ManualClock


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep FLOWCHART_CANVAS_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("FLOWCHART_CANVAS_"):
            monkeypatch.delenv(key)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    return SurfaceConfig()


@pytest.fixture
def model():
    return DiagramModel()


@pytest.fixture
def figure():
    fig = Figure(figsize=(6, 4), dpi=100)
    FigureCanvasAgg(fig)
    return fig


@pytest.fixture
def surface(figure, clock):
    s = DiagramSurface(figure=figure, timer_factory=clock)
    yield s
    s.teardown()

"""
Core Components Package for the Diagram Surface
This package provides the diagram model, its geometric view, rendering and
pointer/keyboard interaction.
"""

from .diagram_model import (
    DiagramModel,
    Node,
    Edge,
    RemovalResult,
    PendingChange,
)
from .diagram_geometry import DiagramGeometry, GeometrySnapshot
from .diagram_renderer import DiagramRenderer
from .interaction_handler import InteractionHandler, InteractionMode, DragKind

__all__ = [
    # Diagram Model
    'DiagramModel',
    'Node',
    'Edge',
    'RemovalResult',
    'PendingChange',

    # Geometry
    'DiagramGeometry',
    'GeometrySnapshot',

    # Rendering
    'DiagramRenderer',

    # Interaction Handling
    'InteractionHandler',
    'InteractionMode',
    'DragKind',
]

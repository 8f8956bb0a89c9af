"""
Utilities Package for the Diagram Surface
This package provides geometry primitives and error handling helpers.
"""

from .error_handling import (
    ErrorHandlingSystem,
    ErrorSeverity,
    ErrorCategory,
    ErrorRecord,
    DiagramError,
    MalformedGraphError,
    OperationResult,
)
from .geometry_utils import (
    GeometryUtils,
    Point2D,
    Rectangle,
    as_point,
    as_points,
)

__all__ = [
    # Error Handling
    'ErrorHandlingSystem',
    'ErrorSeverity',
    'ErrorCategory',
    'ErrorRecord',
    'DiagramError',
    'MalformedGraphError',
    'OperationResult',

    # Geometry Utils
    'GeometryUtils',
    'Point2D',
    'Rectangle',
    'as_point',
    'as_points',
]

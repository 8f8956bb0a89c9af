"""
Business Logic Package for the Diagram Surface
This package provides the timed reveal of generated graphs and the eraser.
"""

from .reveal_scheduler import (
    RevealScheduler,
    RevealState,
    TimerFactory,
)
from .eraser_engine import (
    EraserEngine,
    EraseHits,
)

__all__ = [
    # Reveal Scheduling
    'RevealScheduler',
    'RevealState',
    'TimerFactory',

    # Eraser
    'EraserEngine',
    'EraseHits',
]

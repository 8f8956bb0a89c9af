"""
Flowchart Canvas Package
An interactive diagram surface drawn with matplotlib. Generated graphs are
revealed progressively (nodes one by one, then edges) and a free-hand eraser
removes whatever nodes and edges its stroke crosses.

## Package Structure

### Configuration (config/)
- surface_config.py: timing, eraser tolerances and view limits (pydantic-settings)
- visualization_config.py: colour themes, line widths and z-orders

### Core Components (core/)
- diagram_model.py: node/edge store with group ownership and pending-removal flags
- diagram_geometry.py: node rectangles and edge anchor paths derived from the model
- diagram_renderer.py: matplotlib drawing of the model, eraser stroke and progress
- interaction_handler.py: mouse and keyboard handling

### Business Logic (business/)
- reveal_scheduler.py: timed node-then-edge reveal of a target graph
- eraser_engine.py: stroke buffering, resampling, hit testing and commit

### Utilities (utils/)
- geometry_utils.py: segment, rectangle and path intersection kernel
- error_handling.py: diagram errors, operation results and error history

## Usage

```python
import matplotlib.pyplot as plt
from flowchart_canvas import DiagramSurface, init_logging

init_logging()
surface = DiagramSurface()
surface.on_removal_committed(lambda result: print(result.node_ids, result.edge_ids))
surface.load_graph({
    'nodes': [
        {'id': 'a', 'type': 'input', 'position': {'x': 0, 'y': 0}, 'data': {'label': 'Start'}},
        {'id': 'b', 'type': 'output', 'position': {'x': 0, 'y': 120}, 'data': {'label': 'Done'}},
    ],
    'edges': [{'id': 'a-b', 'source': 'a', 'target': 'b'}],
})
plt.show()
```
"""

# Main components
from .surface import DiagramSurface
from .core import DiagramModel, DiagramGeometry, DiagramRenderer, InteractionHandler
from .business import RevealScheduler, EraserEngine
from .utils import ErrorHandlingSystem, GeometryUtils
from .logging_config import init_logging

# Configuration
from .config import SurfaceConfig, get_surface_config, get_visualization_config

# Types and Enums
from .core import Node, Edge, RemovalResult, PendingChange, InteractionMode
from .business import RevealState, EraseHits
from .models import GraphSpec, NodeSpec, EdgeSpec, NodeRole
from .utils import (
    Point2D,
    Rectangle,
    DiagramError,
    MalformedGraphError,
    OperationResult,
    ErrorSeverity,
    ErrorCategory,
)

__version__ = "1.0.0"

__all__ = [
    # Surface
    'DiagramSurface',

    # Core Components
    'DiagramModel',
    'DiagramGeometry',
    'DiagramRenderer',
    'InteractionHandler',

    # Business Logic
    'RevealScheduler',
    'EraserEngine',

    # Utilities
    'ErrorHandlingSystem',
    'GeometryUtils',
    'init_logging',

    # Configuration
    'SurfaceConfig',
    'get_surface_config',
    'get_visualization_config',

    # Types and Enums
    'Node',
    'Edge',
    'RemovalResult',
    'PendingChange',
    'InteractionMode',
    'RevealState',
    'EraseHits',
    'GraphSpec',
    'NodeSpec',
    'EdgeSpec',
    'NodeRole',
    'Point2D',
    'Rectangle',
    'DiagramError',
    'MalformedGraphError',
    'OperationResult',
    'ErrorSeverity',
    'ErrorCategory',
]

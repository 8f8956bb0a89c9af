"""
Configuration Package for the Diagram Surface
This package provides centralized configuration for all diagram surface components.
"""

from .surface_config import (
    SurfaceConfig,
    get_surface_config,
)

from .visualization_config import (
    get_visualization_config,
    get_color_palette,
    COLOR_PALETTES,
    ROLE_COLORS,
)

__all__ = [
    # Surface Configuration
    'SurfaceConfig',
    'get_surface_config',

    # Visualization Configuration
    'get_visualization_config',
    'get_color_palette',
    'COLOR_PALETTES',
    'ROLE_COLORS',
]

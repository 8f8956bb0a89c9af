"""
Visualization Configuration Module
This module contains the colour themes and drawing constants used by the diagram renderer.
"""

import copy
from typing import Dict, Any

# Color Palettes
COLOR_PALETTES = {
    'light': {
        'background': '#f9fafb',
        'grid': '#9ca3af',
        'text': '#111827',
        'node_face': '#ffffff',
        'node_border': '#374151',
        'edge': '#6b7280',
        'edge_label_face': '#ffffff',
        'stroke': '#ef4444',
        'panel_face': '#ffffff',
        'panel_border': '#e5e7eb',
    },
    'dark': {
        'background': '#0a0a0a',
        'grid': '#262626',
        'text': '#ffffff',
        'node_face': '#262626',
        'node_border': '#e5e7eb',
        'edge': '#d1d5db',
        'edge_label_face': '#262626',
        'stroke': '#f87171',
        'panel_face': '#262626',
        'panel_border': '#404040',
    },
}

# Node accent colours per role and theme
ROLE_COLORS = {
    'light': {
        'start': '#374151',
        'end': '#d1d5db',
        'process': '#6b7280',
        'decision': '#9ca3af',
        'group': '#374151',
    },
    'dark': {
        'start': '#e5e7eb',
        'end': '#6b7280',
        'process': '#d1d5db',
        'decision': '#9ca3af',
        'group': '#e5e7eb',
    },
}

# Node Visualization Configuration
NODE_VISUALIZATION = {
    'border_linewidth': 1.5,
    'accent_linewidth': 3.0,
    'corner_radius': 6.0,
    'group_fill_alpha': 0.15,
    'group_linestyle': '--',
    'label_font_size': 9,
    'group_label_font_size': 8,
    'decision_border_style': 'round,pad=0',
    'z_order_group': 1,
    'z_order_node': 3,
    'z_order_label': 4,
}

# Edge Visualization Configuration
EDGE_VISUALIZATION = {
    'linewidth': 1.5,
    'alpha': 1.0,
    'arrow_style': '-|>',
    'arrow_size': 10,
    'label_font_size': 8,
    'z_order': 2,
}

# Eraser stroke Configuration
STROKE_VISUALIZATION = {
    'linewidth': 2.0,
    'alpha': 0.6,
    'linestyle': '-',
    'z_order': 8,
}

# Reveal progress caption
PROGRESS_VISUALIZATION = {
    'font_size': 9,
    'position': (0.02, 0.98),  # axes fraction
    'z_order': 9,
}

# Grid and Axes Configuration
GRID_CONFIG = {
    'show_grid': True,
    'grid_alpha': 0.3,
    'grid_linestyle': ':',
    'grid_linewidth': 0.5,
    'view_padding': 40.0,  # diagram units around the content
}


def get_visualization_config(theme: str = 'light', **overrides) -> Dict[str, Any]:
    """
    Get visualization configuration for a theme with overrides.

    Args:
        theme: 'light' or 'dark'
        **overrides: Configuration overrides (dict values are merged per section)

    Returns:
        Complete visualization configuration dictionary
    """
    if theme not in COLOR_PALETTES:
        theme = 'light'

    config = copy.deepcopy({
        'theme': theme,
        'colors': COLOR_PALETTES[theme],
        'roles': ROLE_COLORS[theme],
        'nodes': NODE_VISUALIZATION,
        'edges': EDGE_VISUALIZATION,
        'stroke': STROKE_VISUALIZATION,
        'progress': PROGRESS_VISUALIZATION,
        'grid': GRID_CONFIG,
    })

    # Apply overrides
    for key, value in overrides.items():
        if key in config and isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = value

    return config


def get_color_palette(theme: str = 'light') -> Dict[str, str]:
    """Get a specific color palette."""
    return COLOR_PALETTES.get(theme, COLOR_PALETTES['light']).copy()

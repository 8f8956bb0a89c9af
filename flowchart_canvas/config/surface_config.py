"""
Diagram Surface Configuration Module
Timing, hit-testing and interaction settings for one diagram surface.
Values load from keyword overrides and FLOWCHART_CANVAS_* environment variables.
"""

from typing import Any, Dict, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SurfaceConfig(BaseSettings):
    """Runtime configuration honoured by the scheduler, eraser and interaction handler."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWCHART_CANVAS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Reveal animation
    node_delay_ms: int = Field(200, ge=0, description="Delay before each node is revealed (ms)")
    edge_delay_ms: int = Field(50, ge=0, description="Delay before each edge is revealed (ms)")

    # Eraser hit-testing
    erase_proximity_threshold: float = Field(
        1.0, ge=0.0,
        description="Distance within which a stroke touches an edge it did not cross",
    )
    resample_max_gap: float = Field(
        5.0, gt=0.0,
        description="Largest gap between consecutive stroke samples after resampling",
    )

    # Node geometry for nodes without an explicit size
    default_node_width: float = Field(150.0, ge=0.0)
    default_node_height: float = Field(40.0, ge=0.0)

    # Presentation
    pending_removal_alpha: float = Field(0.3, ge=0.0, le=1.0)
    theme: str = Field("light", description="'light' or 'dark'")

    # Zoom and pan
    zoom_in_factor: float = Field(0.9, gt=0.0)
    zoom_out_factor: float = Field(1.1, gt=0.0)
    min_view_span: float = Field(20.0, gt=0.0)
    max_view_span: float = Field(20000.0, gt=0.0)

    @field_validator("theme")
    @classmethod
    def _validate_theme(cls, value: str) -> str:
        value = value.lower()
        if value not in ("light", "dark"):
            raise ValueError("theme must be 'light' or 'dark'")
        return value


def get_surface_config(config: Optional[Union[SurfaceConfig, Dict[str, Any]]] = None) -> SurfaceConfig:
    """
    Build a SurfaceConfig from optional overrides.

    Args:
        config: SurfaceConfig (returned as is), dictionary of field overrides,
            or None for defaults/environment

    Returns:
        Validated SurfaceConfig instance
    """
    if isinstance(config, SurfaceConfig):
        return config
    return SurfaceConfig(**(config or {}))

"""
Pydantic schemas for datasets, map styles and the live trace session.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List

from .trace import validate_target_value
from ..config import MAP_STYLES, settings


def validate_style_value(v: str) -> str:
    if v not in MAP_STYLES:
        raise ValueError(f"Unknown map style '{v}'. Available: {', '.join(MAP_STYLES)}")
    return v


class DatasetStatus(BaseModel):
    """Loaded cable network summary."""

    loaded: bool
    landing_count: int = 0
    cable_count: int = 0
    vertex_count: int = 0
    edge_count: int = 0
    dropped_cables: int = 0
    fallback_mode: bool = True


class MapStyleResponse(BaseModel):
    """One selectable map style."""

    key: str
    label: str
    style: str
    projection: str


class SessionCreate(BaseModel):
    """Live trace session creation schema."""

    target: str = settings.default_target
    style: str = settings.default_map_style

    @field_validator("target")
    @classmethod
    def validate_target(cls, v):
        return validate_target_value(v)

    @field_validator("style")
    @classmethod
    def validate_style(cls, v):
        return validate_style_value(v)


class StyleUpdate(BaseModel):
    """Map style change schema."""

    style: str

    @field_validator("style")
    @classmethod
    def validate_style(cls, v):
        return validate_style_value(v)


class SessionStatus(BaseModel):
    """Live trace session status."""

    target: str
    style: str
    hop_count: int
    finished: bool
    closed: bool
    pending_batches: int
    fallback_mode: bool
    error: Optional[str] = None
    hops: List[str] = []
    plans: List[str] = []

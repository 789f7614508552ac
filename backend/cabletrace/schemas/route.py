"""
Pydantic schemas for route planning requests and results.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List

from .hop import Hop


class RouteRequest(BaseModel):
    """Route planning request: hops in stream order."""

    hops: List[Hop]

    @field_validator("hops")
    @classmethod
    def validate_hops(cls, v):
        """Hop numbers must be strictly increasing."""
        for previous, current in zip(v, v[1:]):
            if current.hop <= previous.hop:
                raise ValueError(f"Hop {current.hop} follows hop {previous.hop}; hops must be in order")
        return v


class LandingResponse(BaseModel):
    """Resolved landing for one side of a pair."""

    key: str
    name: Optional[str] = None
    distance_km: float


class SegmentResponse(BaseModel):
    """One animatable route segment."""

    kind: str
    cable_name: Optional[str] = None
    coordinates: List[List[float]]


class PairPlanResponse(BaseModel):
    """Routing outcome for one consecutive hop pair."""

    index: int
    source_hop: int
    target_hop: int
    decision: str
    reason: Optional[str] = None
    source_landing: Optional[LandingResponse] = None
    target_landing: Optional[LandingResponse] = None
    path: Optional[List[str]] = None
    cables: List[str] = []
    segments: List[SegmentResponse] = []
    description: str


class RouteResponse(BaseModel):
    """Route planning response."""

    fallback_mode: bool
    pairs: List[PairPlanResponse]
    segment_count: int

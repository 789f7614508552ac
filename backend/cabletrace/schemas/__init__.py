"""
Pydantic schemas package.
"""

from .hop import Hop, parse_hop_record
from .trace import TracerouteHopResponse, TraceResponse, TraceDetailResponse, TraceListResponse
from .route import RouteRequest, LandingResponse, SegmentResponse, PairPlanResponse, RouteResponse
from .session import DatasetStatus, MapStyleResponse, SessionCreate, StyleUpdate, SessionStatus

__all__ = [
    # Hops
    "Hop",
    "parse_hop_record",
    # Traces
    "TracerouteHopResponse",
    "TraceResponse",
    "TraceDetailResponse",
    "TraceListResponse",
    # Routes
    "RouteRequest",
    "LandingResponse",
    "SegmentResponse",
    "PairPlanResponse",
    "RouteResponse",
    # Session
    "DatasetStatus",
    "MapStyleResponse",
    "SessionCreate",
    "StyleUpdate",
    "SessionStatus",
]

"""
Pydantic schemas for recorded traces and their hops.
"""

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
import re

# Hostname or IPv4/IPv6 literal; rules out shell metacharacters and options
TARGET_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.\-:]*$")


def validate_target_value(v: str) -> str:
    """Validate a traceroute target (hostname or IP address)."""
    v = v.strip()
    if not v:
        raise ValueError("Target must not be empty")
    if len(v) > 253 or not TARGET_PATTERN.match(v):
        raise ValueError(f"Invalid trace target '{v}'")
    return v


class TracerouteHopResponse(BaseModel):
    """Stored hop response schema."""

    id: int
    hop_number: int
    ip: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    org: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TraceResponse(BaseModel):
    """Trace response schema."""

    id: int
    target: str
    status: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    hop_count: int
    error_message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TraceDetailResponse(TraceResponse):
    """Detailed trace response with hops."""

    hops: list[TracerouteHopResponse] = []


class TraceListResponse(BaseModel):
    """Trace list response schema."""

    traces: list[TraceResponse]
    total: int
    page: int
    page_size: int

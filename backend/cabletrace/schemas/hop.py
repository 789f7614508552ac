"""
Pydantic schema for streamed traceroute hop records.
"""

import json
import math
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import MalformedRecord


class Hop(BaseModel):
    """One geolocated traceroute hop, as sent on the hop stream.

    ``lat``/``lon`` are absent when geolocation failed or the address is
    private; ``error`` carries the enrichment failure message.
    """

    hop: int
    ip: str
    city: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    org: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    @field_validator("hop")
    @classmethod
    def validate_hop(cls, v):
        """Hop numbers start at 1."""
        if v < 1:
            raise ValueError(f"Hop number must be positive, got {v}")
        return v

    @field_validator("lat", "lon")
    @classmethod
    def drop_non_finite(cls, v):
        """NaN/inf coordinates are treated as unknown."""
        if v is not None and not math.isfinite(v):
            return None
        return v

    @property
    def index(self) -> int:
        return self.hop

    @property
    def coordinate(self) -> Optional[Tuple[float, float]]:
        """(lon, lat) when both components are known."""
        if self.lat is None or self.lon is None:
            return None
        return (self.lon, self.lat)

    def label(self) -> str:
        """Popup text for the hop marker."""
        return f"{self.hop}: {self.ip} ({self.city or 'Unknown'}, {self.country or 'Unknown'})"

    def summary(self) -> str:
        """One-line text panel entry."""
        return f"{self.hop}. {self.ip} - {self.city or 'Unknown'}, {self.country or 'Unknown'}"


def parse_hop_record(raw: Union[str, bytes, Mapping[str, Any]]) -> Hop:
    """
    Parse one hop record from the stream.

    Args:
        raw: JSON text or an already-decoded mapping

    Returns:
        Validated Hop

    Raises:
        MalformedRecord: If the JSON is invalid or required fields are missing
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedRecord(f"Invalid hop JSON: {e}") from e
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"Hop record must be an object, got {type(raw).__name__}")
    try:
        return Hop.model_validate(dict(raw))
    except ValidationError as e:
        raise MalformedRecord(f"Invalid hop record: {e.errors()[0]['msg']}") from e

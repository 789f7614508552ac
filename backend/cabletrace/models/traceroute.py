"""
Traceroute hop model for geolocated network path information.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Float
from sqlalchemy.orm import relationship

from ..database import Base


class TracerouteHop(Base):
    """One geolocated hop of a recorded trace."""

    __tablename__ = "traceroute_hops"

    id = Column(Integer, primary_key=True, index=True)
    hop_number = Column(Integer, nullable=False)  # position in the stream, from 1
    ip = Column(String, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    org = Column(String, nullable=True)
    error = Column(String, nullable=True)  # set when geo lookup failed

    # Foreign keys
    trace_id = Column(Integer, ForeignKey("traces.id"), nullable=False)

    # Relationships
    trace = relationship("Trace", back_populates="hops")

    def __repr__(self):
        return f"<TracerouteHop(hop={self.hop_number}, ip='{self.ip}')>"

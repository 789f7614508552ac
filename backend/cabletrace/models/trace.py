"""
Trace model for recorded traceroute runs.

This module defines the Trace model for tracking one traceroute collection
against a target, including its status, timing and the hops it produced.
Computed cable paths are never stored; they are recomputed from the hops.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..database import Base


class TraceStatus(str, enum.Enum):
    """Enumeration of possible trace statuses.

    Attributes:
        PENDING: Trace is created but traceroute has not started
        RUNNING: Hops are currently streaming in
        COMPLETED: Traceroute finished and the end marker was sent
        FAILED: Traceroute could not run or aborted with an error
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class Trace(Base):
    """SQLAlchemy model for a traceroute run.

    Attributes:
        id: Primary key identifier
        target: Hostname or IP address that was traced
        status: Current status of the trace (TraceStatus enum)
        started_at: Timestamp when the traceroute process started
        completed_at: Timestamp when the stream ended (success or failure)
        created_at: Timestamp when the trace was requested
        hop_count: Number of hop records received so far
        error_message: Error details if the trace failed
        hops: Relationship to the TracerouteHop rows, ordered by hop number

    Example:
        >>> trace = Trace(target="openai.com", status=TraceStatus.PENDING)
        >>> db.add(trace)
        >>> db.commit()
    """

    __tablename__ = "traces"

    id = Column(Integer, primary_key=True, index=True)
    target = Column(String, nullable=False)
    status = Column(Enum(TraceStatus), nullable=False, default=TraceStatus.PENDING)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    hop_count = Column(Integer, default=0)
    error_message = Column(Text, nullable=True)

    # Relationships
    hops = relationship(
        "TracerouteHop",
        back_populates="trace",
        cascade="all, delete-orphan",
        order_by="TracerouteHop.hop_number",
    )

    def __repr__(self):
        return f"<Trace(id={self.id}, target='{self.target}', status='{self.status}')>"

"""
Exception hierarchy for the cable trace backend.

Only data-loading, record-parsing and trace-collection failures are
exceptions. Per-pair routing fallbacks (no nearby landing, no cable path)
are ordinary planner decisions, see ``routing.planner.FallbackReason``.
"""


class CableTraceError(Exception):
    """Base class for all cable trace errors."""


class DataUnavailable(CableTraceError):
    """A cable or landing dataset could not be loaded.

    Callers degrade to direct-line routing instead of failing.
    """


class MalformedRecord(CableTraceError):
    """An incoming hop record could not be parsed and is dropped."""


class TraceError(CableTraceError):
    """The traceroute process could not be started or failed."""

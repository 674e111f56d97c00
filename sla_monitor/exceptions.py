"""Exception hierarchy for the SLA monitor.

Explicit exception types let the worker translate failures into job
outcomes: transient backend problems are retried, malformed data is not.
Adapters translate library errors (redis, supabase, pydantic) into these at
their boundary.
"""

from __future__ import annotations


class SLAMonitorError(Exception):
    """Base class for all SLA monitor errors."""

    retryable = False


class StoreUnavailable(SLAMonitorError):
    """Raised when the submission store cannot be reached or fails transiently."""

    retryable = True


class DispatchFailed(SLAMonitorError):
    """Raised when the notification dispatcher fails to deliver an escalation."""

    retryable = True


class BrokerUnavailable(SLAMonitorError):
    """Raised when the queue broker cannot be reached."""

    retryable = True


class ValidationError(SLAMonitorError):
    """Raised when a submission row or job payload is missing required fields."""


class RetriesExhausted(SLAMonitorError):
    """Terminal failure: a job failed more than the configured retry budget."""

    def __init__(self, message: str, retry_count: int = 0, last_error: str | None = None):
        super().__init__(message)
        self.retry_count = retry_count
        self.last_error = last_error


__all__ = [
    "SLAMonitorError",
    "StoreUnavailable",
    "DispatchFailed",
    "BrokerUnavailable",
    "ValidationError",
    "RetriesExhausted",
]

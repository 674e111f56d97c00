from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from sla_monitor.utils.jobs import Submission

"""Infrastructure Interface Contracts.

Purpose:
    This module defines the contracts for the collaborators the SLA worker
    and engine talk to: the queue broker, the submission store, the
    notification dispatcher and the audit recorder. Callers depend on these
    protocols, never on concrete adapters, so an in-memory queue can stand in
    for Redis in tests and a fake store for Supabase.

Contents:
    - QueueBroker: at-least-once FIFO list; `durable` says whether jobs outlive the process.
    - SubmissionStore: reads submissions and performs the conditional
      OPEN -> ESCALATED transition.
    - NotificationDispatcher: sends the actual escalation alert.
    - AuditRecorder: receives one structured event per job outcome.

How to Use:
    - Callers: type-hint arguments with these protocols.
        Example: SLAEngine(store: SubmissionStore, dispatcher: NotificationDispatcher)
    - Implementers: satisfy the methods below; see the adapters under
      `sla_monitor.infrastructure.queue` and `sla_monitor.tools`.
"""


class QueueBroker(Protocol):
    """Blocking FIFO list contract.

    Delivery is at-least-once with no acknowledgment: whatever
    `blocking_pop` returns is claimed by the caller.
    """

    durable: bool  # False when queued jobs vanish with the process

    def push(self, queue_name: str, job: Dict[str, Any]) -> None:
        """Append to the tail. Raises BrokerUnavailable if the backend is down."""

    def blocking_pop(self, queue_name: str, timeout: float) -> Optional[Dict[str, Any]]:
        """Remove and return the head, waiting up to `timeout` seconds. None on timeout."""

    def length(self, queue_name: str) -> int:
        """Number of pending jobs."""

    def clear(self, queue_name: str) -> int:
        """Maintenance only: drop every pending job and return how many were removed."""


class SubmissionStore(Protocol):
    def list_open_submissions_past_deadline(self, now: datetime) -> List[Submission]:
        """OPEN submissions whose deadline is at or before `now`. Raises StoreUnavailable."""

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        """Single submission lookup, None when missing. Raises StoreUnavailable."""

    def set_escalated(self, submission_id: str) -> bool:
        """Conditional update: OPEN -> ESCALATED and escalation_count + 1.

        Returns True only when this call performed the transition.
        """


class NotificationDispatcher(Protocol):
    def notify(self, submission: Submission) -> None:
        """Send the escalation alert. Raises DispatchFailed on failure."""


class AuditRecorder(Protocol):
    def record(self, event: Dict[str, Any]) -> None:
        """Persist one audit event: {type, job_type, submission_id, error, retry_count, timestamp}."""


__all__ = ["QueueBroker", "SubmissionStore", "NotificationDispatcher", "AuditRecorder"]

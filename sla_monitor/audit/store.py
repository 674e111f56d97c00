from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from sla_monitor.infrastructure.interfaces import AuditRecorder
from sla_monitor.utils.jobs import Job, utcnow

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"

# Audit event types, one per job outcome
JOB_SUCCEEDED = "job.succeeded"
JOB_RETRIED = "job.retried"
JOB_FAILED = "job.failed"
JOB_DROPPED = "job.dropped"


def build_event(
    event_type: str,
    job: Optional[Job] = None,
    error: Optional[BaseException | str] = None,
    retry_count: Optional[int] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Shape an audit event: {type, job_type, submission_id, error, retry_count, timestamp}."""
    event = {
        "type": event_type,
        "actor": SYSTEM_ACTOR,
        "job_id": job.job_id if job else None,
        "job_type": job.type.value if job else None,
        "submission_id": job.submission_id if job else None,
        "error": None if error is None else (error if isinstance(error, str) else f"{type(error).__name__}: {error}"),
        "retry_count": retry_count if retry_count is not None else (job.retry_count if job else 0),
        "timestamp": utcnow().isoformat(),
    }
    event.update(extra)
    return event


def record_safely(audit: Optional[AuditRecorder], event: Dict[str, Any]) -> None:
    """Fire-and-forget: recorder failures are logged, never raised."""
    if audit is None:
        return
    try:
        audit.record(event)
    except Exception:
        logger.exception("audit record failed for event %s", event.get("type"))


class InMemoryAuditStore:
    """Simple in-memory audit store for tests and local runs."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def record(self, event: Dict[str, Any]) -> None:
        with self._lock:
            self.events.append(dict(event))

    def of_type(self, event_type: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [e for e in self.events if e.get("type") == event_type]


class SupabaseAuditStore:
    """Writes events to the audit log table as {actor_id, action, resource, resource_id, diff}."""

    def __init__(self, url: str, key: str, table: str = "audit_logs", client: Optional[Any] = None):
        if client is None:
            from supabase import create_client

            client = create_client(url, key)
        self.client = client
        self.table = table

    def record(self, event: Dict[str, Any]) -> None:
        row = {
            "actor_id": event.get("actor", SYSTEM_ACTOR),
            "action": event.get("type"),
            "resource": "sla_job",
            "resource_id": event.get("submission_id") or event.get("job_id") or "monitoring",
            "diff": {k: v for k, v in event.items() if k not in ("actor", "type")},
        }
        self.client.table(self.table).insert(row).execute()


__all__ = [
    "SYSTEM_ACTOR",
    "JOB_SUCCEEDED",
    "JOB_RETRIED",
    "JOB_FAILED",
    "JOB_DROPPED",
    "build_event",
    "record_safely",
    "InMemoryAuditStore",
    "SupabaseAuditStore",
]

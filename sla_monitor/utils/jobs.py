"""Job and submission data contracts.

A `Job` is the unit of work exchanged through the queue. Jobs travel as
plain JSON-compatible dicts so any list-capable broker can carry them:

    {
        "job_id": "<uuid hex>",
        "type": "SCAN" | "ESCALATE",
        "submission_id": "<id>" | None,
        "scheduled_at": "<iso8601 UTC>",
        "retry_count": 0
    }

Handlers report back with a `JobOutcome`; the worker decides whether to
requeue or drop from `outcome.kind` alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import uuid

import pydantic

from sla_monitor.exceptions import ValidationError
from sla_monitor.utils.schemas import JobMessage, SubmissionRow


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus(str, Enum):
    OPEN = "OPEN"
    ESCALATED = "ESCALATED"
    RESOLVED = "RESOLVED"


@dataclass
class Submission:
    """Snapshot of a submission as read from the store."""

    id: str
    received_at: datetime
    sla_days: int
    status: SubmissionStatus = SubmissionStatus.OPEN
    escalation_count: int = 0
    category: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == SubmissionStatus.OPEN

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Submission":
        """Validate a store row; raises ValidationError on missing/invalid fields."""
        try:
            parsed = SubmissionRow.model_validate(row)
        except pydantic.ValidationError as e:
            rid = row.get("id") if isinstance(row, dict) else None
            raise ValidationError(f"invalid submission row {rid!r}: {e}") from e
        return cls(
            id=parsed.id,
            received_at=parsed.received_at,
            sla_days=parsed.sla_days,
            status=SubmissionStatus(parsed.status),
            escalation_count=parsed.escalation_count,
            category=parsed.category,
        )


class JobType(str, Enum):
    SCAN = "SCAN"
    ESCALATE = "ESCALATE"


@dataclass(frozen=True)
class Job:
    type: JobType
    submission_id: Optional[str] = None
    scheduled_at: datetime = field(default_factory=utcnow)
    retry_count: int = 0
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def scan(cls) -> "Job":
        return cls(type=JobType.SCAN)

    @classmethod
    def escalate(cls, submission_id: str) -> "Job":
        return cls(type=JobType.ESCALATE, submission_id=submission_id)

    def next_attempt(self) -> "Job":
        """Copy for requeueing: same job_id, retry_count + 1, fresh scheduled_at."""
        return replace(self, retry_count=self.retry_count + 1, scheduled_at=utcnow())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "type": self.type.value,
            "submission_id": self.submission_id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "retry_count": self.retry_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Job":
        try:
            msg = JobMessage.model_validate(data)
        except pydantic.ValidationError as e:
            raise ValidationError(f"malformed job payload: {e}") from e
        return cls(
            type=JobType(msg.type),
            submission_id=msg.submission_id,
            scheduled_at=msg.scheduled_at,
            retry_count=msg.retry_count,
            job_id=msg.job_id,
        )


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass(frozen=True)
class JobOutcome:
    """Tagged handler result: Success | RetryableFailure(error) | FatalFailure(error)."""

    kind: OutcomeKind
    error: Optional[BaseException] = None
    detail: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, **detail: Any) -> "JobOutcome":
        return cls(OutcomeKind.SUCCESS, None, detail)

    @classmethod
    def retryable(cls, error: BaseException) -> "JobOutcome":
        return cls(OutcomeKind.RETRYABLE, error)

    @classmethod
    def fatal(cls, error: BaseException) -> "JobOutcome":
        return cls(OutcomeKind.FATAL, error)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCESS


__all__ = [
    "utcnow",
    "SubmissionStatus",
    "Submission",
    "JobType",
    "Job",
    "OutcomeKind",
    "JobOutcome",
]

"""SLA deadline arithmetic.

Rounding rule: deadlines are whole calendar days in UTC. A submission
received at any time on day 0 with ``sla_days = N`` is due by the end of
day N and breaches at 00:00 UTC of day N + 1. A submission is breached when
``now >= deadline`` (the boundary instant itself counts as breached).
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from sla_monitor.utils.jobs import Submission, SubmissionStatus

# Default SLA days per submission category.
SLA_CATEGORIES: Dict[str, Dict[str, float]] = {
    "complaint": {"days": 7, "escalation_days": 5},
    "suggestion": {"days": 14, "escalation_days": 10},
    "rti": {"days": 30, "escalation_days": 25},
    "certificate": {"days": 7, "escalation_days": 5},
    "grievance": {"days": 14, "escalation_days": 10},
    "waste-pickup": {"days": 2, "escalation_days": 1},
    "water-tanker": {"days": 1, "escalation_days": 0.5},
    "general": {"days": 7, "escalation_days": 5},
}

AT_RISK_HOURS = 4
DUE_SOON_HOURS = 24


def to_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def default_sla_days(category: Optional[str]) -> int:
    cfg = SLA_CATEGORIES.get((category or "").lower()) or SLA_CATEGORIES["general"]
    return int(cfg["days"])


def compute_deadline(received_at: datetime, sla_days: int) -> datetime:
    """Return the breach instant: start of (received day + sla_days + 1), UTC."""
    day0 = to_utc(received_at).replace(hour=0, minute=0, second=0, microsecond=0)
    return day0 + timedelta(days=sla_days + 1)


def is_breached(submission: Submission, now: datetime) -> bool:
    """True when an OPEN submission has reached its deadline."""
    if submission.status != SubmissionStatus.OPEN:
        return False
    return to_utc(now) >= compute_deadline(submission.received_at, submission.sla_days)


def hours_remaining(submission: Submission, now: datetime) -> float:
    delta = compute_deadline(submission.received_at, submission.sla_days) - to_utc(now)
    return delta.total_seconds() / 3600.0


def sla_status(submission: Submission, now: datetime) -> Dict[str, Any]:
    """Classify a submission for display: on-track, at-risk, breached or completed."""
    if submission.status == SubmissionStatus.RESOLVED:
        return {"status": "completed", "severity": "low", "hours_remaining": 0, "message": "Completed"}

    remaining = hours_remaining(submission, now)
    hours = int(abs(remaining))
    if remaining <= 0:
        return {
            "status": "breached",
            "severity": "critical",
            "hours_remaining": hours,
            "message": f"Overdue by {hours} hours",
        }
    if remaining <= AT_RISK_HOURS:
        return {"status": "at-risk", "severity": "high", "hours_remaining": hours, "message": f"Due in {hours} hours"}
    severity = "medium" if remaining <= DUE_SOON_HOURS else "low"
    return {
        "status": "on-track",
        "severity": severity,
        "hours_remaining": hours,
        "message": f"{hours} hours remaining",
    }


__all__ = [
    "SLA_CATEGORIES",
    "to_utc",
    "default_sla_days",
    "compute_deadline",
    "is_breached",
    "hours_remaining",
    "sla_status",
]

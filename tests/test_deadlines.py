from datetime import timedelta

from sla_monitor.engine.deadlines import compute_deadline, default_sla_days, is_breached, sla_status
from sla_monitor.utils.jobs import Submission, SubmissionStatus

from conftest import DAY0, day


def _sub(sla_days=2, status=SubmissionStatus.OPEN, received_at=DAY0):
    return Submission(id="s", received_at=received_at, sla_days=sla_days, status=status)


def test_deadline_is_start_of_day_after_last_sla_day():
    assert compute_deadline(DAY0, 2) == day(3)
    # time of day on day 0 does not matter
    assert compute_deadline(day(0, 23, 59), 2) == day(3)
    assert compute_deadline(day(0), 2) == day(3)


def test_breach_boundary_is_inclusive():
    sub = _sub(sla_days=2)
    assert not is_breached(sub, day(3) - timedelta(microseconds=1))
    assert is_breached(sub, day(3))
    assert is_breached(sub, day(10))


def test_naive_now_is_treated_as_utc():
    sub = _sub(sla_days=1)
    assert is_breached(sub, day(2).replace(tzinfo=None))


def test_non_open_submissions_never_breach():
    for status in (SubmissionStatus.ESCALATED, SubmissionStatus.RESOLVED):
        assert not is_breached(_sub(status=status), day(30))


def test_sla_status_classification():
    sub = _sub(sla_days=2)  # deadline day(3)
    assert sla_status(sub, day(1))["status"] == "on-track"
    assert sla_status(sub, day(1))["severity"] == "low"
    assert sla_status(sub, day(2, 6))["severity"] == "medium"

    at_risk = sla_status(sub, day(2, 21))
    assert at_risk["status"] == "at-risk"
    assert at_risk["hours_remaining"] == 3

    breached = sla_status(sub, day(3, 5))
    assert breached["status"] == "breached"
    assert breached["severity"] == "critical"
    assert breached["message"] == "Overdue by 5 hours"

    resolved = _sub(status=SubmissionStatus.RESOLVED)
    assert sla_status(resolved, day(30))["status"] == "completed"


def test_default_sla_days_by_category():
    assert default_sla_days("rti") == 30
    assert default_sla_days("Waste-Pickup") == 2
    assert default_sla_days("unknown") == 7
    assert default_sla_days(None) == 7

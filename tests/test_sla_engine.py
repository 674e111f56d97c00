from unittest.mock import MagicMock

import pytest

from sla_monitor.engine.sla_engine import EscalationAction, SLAEngine
from sla_monitor.exceptions import DispatchFailed, StoreUnavailable, ValidationError
from sla_monitor.tools.notifications import EscalationDispatcher
from sla_monitor.utils.jobs import Submission, SubmissionStatus

from conftest import DAY0, day


def test_scenario_breach_escalate_then_no_longer_reported(store, engine, delivery):
    store.add("S1", received_at=DAY0, sla_days=2)

    assert engine.check_breaches(day(3)) == [EscalationAction("S1")]

    assert engine.escalate("S1") is True
    s1 = store.get_submission("S1")
    assert s1.status == SubmissionStatus.ESCALATED
    assert s1.escalation_count == 1
    assert len(delivery.sent) == 1
    assert engine.check_breaches(day(3)) == []


def test_check_breaches_reports_each_open_breach_once(store, engine):
    store.add("due", received_at=DAY0, sla_days=2)
    store.add("boundary", received_at=day(0, 23, 59), sla_days=2)
    store.add("not-yet", received_at=DAY0, sla_days=3)
    store.add("escalated", received_at=DAY0, sla_days=1, status=SubmissionStatus.ESCALATED)
    store.add("resolved", received_at=DAY0, sla_days=1, status=SubmissionStatus.RESOLVED)

    ids = [a.submission_id for a in engine.check_breaches(day(3))]
    assert sorted(ids) == ["boundary", "due"]


def test_check_breaches_dedupes_and_rechecks_store_results(engine):
    store = MagicMock()
    engine.store = store
    sub = Submission(id="x", received_at=DAY0, sla_days=1)
    early = Submission(id="early", received_at=DAY0, sla_days=10)
    store.list_open_submissions_past_deadline.return_value = [sub, sub, early]
    assert engine.check_breaches(day(3)) == [EscalationAction("x")]


def test_check_breaches_uses_clock_by_default(store, engine, clock):
    store.add("S1", received_at=DAY0, sla_days=2)
    clock.now = day(2, 23)
    assert engine.check_breaches() == []
    clock.now = day(3)
    assert len(engine.check_breaches()) == 1


def test_store_outage_is_store_unavailable(engine):
    engine.store = MagicMock()
    engine.store.list_open_submissions_past_deadline.side_effect = ConnectionError("db down")
    with pytest.raises(StoreUnavailable):
        engine.check_breaches(day(3))


def test_escalate_twice_transitions_once(store, engine, delivery):
    store.add("S1", received_at=DAY0, sla_days=2)
    assert engine.escalate("S1") is True
    assert engine.escalate("S1") is False
    s1 = store.get_submission("S1")
    assert s1.status == SubmissionStatus.ESCALATED
    assert s1.escalation_count == 1
    assert len(delivery.sent) == 1


def test_escalate_missing_or_closed_is_noop(store, engine, delivery):
    store.add("done", received_at=DAY0, sla_days=2, status=SubmissionStatus.RESOLVED)
    assert engine.escalate("missing") is False
    assert engine.escalate("done") is False
    assert delivery.sent == []


def test_dispatch_failure_leaves_submission_open(store, clock):
    adapter = MagicMock()
    adapter.send.side_effect = TimeoutError("smtp timeout")
    engine = SLAEngine(store, EscalationDispatcher(adapter), clock=clock)
    store.add("S1", received_at=DAY0, sla_days=2)
    with pytest.raises(DispatchFailed):
        engine.escalate("S1")
    assert store.get_submission("S1").status == SubmissionStatus.OPEN


def test_store_failure_after_notify_is_retryable_and_rerun_is_safe(store, engine, delivery):
    store.add("S1", received_at=DAY0, sla_days=2)
    real_set = store.set_escalated
    store.set_escalated = MagicMock(side_effect=StoreUnavailable("write timeout"))
    with pytest.raises(StoreUnavailable):
        engine.escalate("S1")
    assert store.get_submission("S1").status == SubmissionStatus.OPEN

    store.set_escalated = real_set
    assert engine.escalate("S1") is True
    # at-least-once notification, exactly-once transition
    assert len(delivery.sent) == 2
    assert store.get_submission("S1").escalation_count == 1


def test_escalate_invalid_row_raises_validation_error(store, engine):
    store.write_row({"id": "bad", "received_at": DAY0, "status": "OPEN"})
    with pytest.raises(ValidationError):
        engine.escalate("bad")


def test_process_escalations_escalates_all_and_reports_failures(store, clock):
    adapter = MagicMock()

    def send(channel, payload, meta=None):
        if payload["submission_id"] == "flaky":
            raise RuntimeError("provider 503")
        return {"status": "SENT"}

    adapter.send.side_effect = send
    engine = SLAEngine(store, EscalationDispatcher(adapter), clock=clock)
    store.add("a", received_at=DAY0, sla_days=1)
    store.add("flaky", received_at=DAY0, sla_days=1)
    store.add("b", received_at=DAY0, sla_days=2)

    summary = engine.process_escalations()
    assert summary["breaches"] == 3
    assert summary["escalated"] == 2
    assert [f["submission_id"] for f in summary["failed"]] == ["flaky"]

    again = engine.process_escalations()
    assert again["breaches"] == 1
    assert again["escalated"] == 0
    assert store.get_submission("a").escalation_count == 1

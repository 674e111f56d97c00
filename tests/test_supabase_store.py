import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from sla_monitor.engine.sla_engine import SLAEngine
from sla_monitor.exceptions import StoreUnavailable, ValidationError
from sla_monitor.tools.store.adapters import supabase_store
from sla_monitor.tools.store.adapters.supabase_store import SupabaseSubmissionStore
from sla_monitor.utils.jobs import SubmissionStatus

from conftest import DAY0, day


def _client(*responses):
    """Supabase client whose query builder chains and returns `responses` in order."""
    builder = MagicMock()
    for name in ("select", "eq", "lt", "order", "range", "limit", "update", "insert"):
        getattr(builder, name).return_value = builder
    builder.execute.side_effect = [SimpleNamespace(data=r) for r in responses]
    client = MagicMock()
    client.table.return_value = builder
    return client, builder


def _row(submission_id, received_at=DAY0, sla_days=2, status="OPEN", escalation_count=0):
    return {
        "id": submission_id,
        "received_at": received_at.isoformat(),
        "sla_days": sla_days,
        "status": status,
        "escalation_count": escalation_count,
        "category": "complaint",
    }


def test_scan_prefilters_then_applies_exact_rule():
    client, builder = _client([_row("due"), _row("not-yet", sla_days=5), {"id": "broken"}])
    store = SupabaseSubmissionStore("u", "k", client=client)

    subs = store.list_open_submissions_past_deadline(day(3, 8))

    assert [s.id for s in subs] == ["due"]
    client.table.assert_called_with("submissions")
    builder.eq.assert_any_call("status", "OPEN")
    cutoff = builder.lt.call_args.args
    assert cutoff[0] == "received_at"
    assert cutoff[1].startswith("2024-03-06")


def test_scan_pages_until_short_page(monkeypatch):
    monkeypatch.setattr(supabase_store, "PAGE_SIZE", 2)
    client, builder = _client([_row("a"), _row("b")], [_row("c")])
    store = SupabaseSubmissionStore("u", "k", client=client)

    subs = store.list_open_submissions_past_deadline(day(3))

    assert [s.id for s in subs] == ["a", "b", "c"]
    assert [c.args for c in builder.range.call_args_list] == [(0, 1), (2, 3)]


def test_get_submission_parses_or_returns_none():
    client, _ = _client([_row("S1", escalation_count=2)], [])
    store = SupabaseSubmissionStore("u", "k", client=client)
    sub = store.get_submission("S1")
    assert sub.escalation_count == 2 and sub.status == SubmissionStatus.OPEN
    assert store.get_submission("missing") is None


def test_get_submission_with_bad_row_is_validation_error():
    client, _ = _client([{"id": "S1", "status": "OPEN"}])
    with pytest.raises(ValidationError):
        SupabaseSubmissionStore("u", "k", client=client).get_submission("S1")


def test_set_escalated_is_conditional_on_what_was_read():
    client, builder = _client([_row("S1", escalation_count=1)], [_row("S1", status="ESCALATED", escalation_count=2)])
    store = SupabaseSubmissionStore("u", "k", client=client)

    assert store.set_escalated("S1") is True
    builder.update.assert_called_once_with({"status": "ESCALATED", "escalation_count": 2})
    builder.eq.assert_any_call("status", "OPEN")
    builder.eq.assert_any_call("escalation_count", 1)


def test_set_escalated_lost_race_returns_false():
    client, _ = _client([_row("S1")], [])
    assert SupabaseSubmissionStore("u", "k", client=client).set_escalated("S1") is False


def test_set_escalated_on_closed_submission_skips_update():
    client, builder = _client([_row("S1", status="RESOLVED")])
    assert SupabaseSubmissionStore("u", "k", client=client).set_escalated("S1") is False
    builder.update.assert_not_called()


def test_client_errors_become_store_unavailable():
    client, builder = _client()
    builder.execute.side_effect = ConnectionError("timeout")
    store = SupabaseSubmissionStore("u", "k", client=client)
    with pytest.raises(StoreUnavailable):
        store.list_open_submissions_past_deadline(day(3))
    with pytest.raises(StoreUnavailable):
        store.get_submission("S1")


@pytest.fixture
def ist_host(monkeypatch):
    """Run with the process timezone set to UTC+05:30."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset unavailable")
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_naive_now_cutoff_is_utc_regardless_of_host_timezone(ist_host):
    row = _row("late", received_at=day(1, 10), sla_days=1)
    client, builder = _client()

    def execute():
        cutoff = builder.lt.call_args.args[1]
        return SimpleNamespace(data=[row] if row["received_at"] < cutoff else [])

    builder.execute.side_effect = execute
    engine = SLAEngine(SupabaseSubmissionStore("u", "k", client=client), MagicMock())

    actions = engine.check_breaches(day(3, 2).replace(tzinfo=None))

    assert builder.lt.call_args.args[1].startswith("2024-03-06")
    assert [a.submission_id for a in actions] == ["late"]

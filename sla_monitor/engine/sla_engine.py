"""SLA breach detection and escalation.

The engine holds no state of its own. `check_breaches` is a pure read over
the store, so any number of workers may scan concurrently; `escalate` is
idempotent because the status transition is a conditional update in the
store. Escalation order is notify first, transition second: a dispatcher
success followed by a store failure is retried and may notify twice, but the
status never transitions twice.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import platform_monitoring

from sla_monitor.engine.deadlines import is_breached
from sla_monitor.exceptions import DispatchFailed, SLAMonitorError, StoreUnavailable
from sla_monitor.infrastructure.interfaces import NotificationDispatcher, SubmissionStore
from sla_monitor.utils.jobs import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscalationAction:
    submission_id: str


class SLAEngine:
    def __init__(
        self,
        store: SubmissionStore,
        dispatcher: NotificationDispatcher,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock or utcnow

    def check_breaches(self, now: Optional[datetime] = None) -> List[EscalationAction]:
        """One action per OPEN submission at or past its deadline, each id once."""
        now = now or self.clock()
        try:
            candidates = self.store.list_open_submissions_past_deadline(now)
        except SLAMonitorError:
            raise
        except Exception as e:
            raise StoreUnavailable(f"listing overdue submissions failed: {e}") from e

        seen = set()
        actions: List[EscalationAction] = []
        for sub in candidates:
            if sub.id in seen or not is_breached(sub, now):
                continue
            seen.add(sub.id)
            actions.append(EscalationAction(submission_id=sub.id))
        platform_monitoring.BREACHES_FOUND.inc(len(actions))
        logger.info("breach scan at %s found %d breached submission(s)", now.isoformat(), len(actions))
        return actions

    def escalate(self, submission_id: str) -> bool:
        """Notify and transition OPEN -> ESCALATED. Returns False when there was nothing to do."""
        try:
            submission = self.store.get_submission(submission_id)
        except SLAMonitorError:
            raise
        except Exception as e:
            raise StoreUnavailable(f"lookup of {submission_id} failed: {e}") from e

        if submission is None or not submission.is_open:
            logger.info("escalation of %s skipped (status=%s)", submission_id, submission.status.value if submission else "missing")
            return False

        try:
            self.dispatcher.notify(submission)
        except DispatchFailed:
            raise
        except Exception as e:
            raise DispatchFailed(f"notify for {submission_id} failed: {e}") from e

        try:
            transitioned = self.store.set_escalated(submission_id)
        except SLAMonitorError:
            raise
        except Exception as e:
            raise StoreUnavailable(f"status update for {submission_id} failed: {e}") from e

        platform_monitoring.log_event("sla.escalate", {"submission_id": submission_id, "transitioned": transitioned})
        return transitioned

    def process_escalations(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Scan and escalate in-process, bypassing the queue.

        A failing escalation is reported in the summary and does not stop the
        remaining ones.
        """
        actions = self.check_breaches(now)
        summary: Dict[str, Any] = {"breaches": len(actions), "escalated": 0, "skipped": 0, "failed": []}
        for action in actions:
            try:
                if self.escalate(action.submission_id):
                    summary["escalated"] += 1
                else:
                    summary["skipped"] += 1
            except SLAMonitorError as e:
                logger.warning("escalation of %s failed: %s", action.submission_id, e)
                summary["failed"].append({"submission_id": action.submission_id, "error": str(e)})
        return summary


__all__ = ["EscalationAction", "SLAEngine"]

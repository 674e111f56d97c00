"""Escalation dispatcher: turns a breached submission into delivery calls.

Implements the NotificationDispatcher contract on top of any DeliveryAdapter.
Delivery is at-least-once: a retried escalation may send the same alert
twice, so providers should deduplicate on `meta["dedupe_key"]`. A channel that
reports DISABLED fails the dispatch, so the submission stays OPEN and the
escalation is retried rather than recorded as done.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from sla_monitor.exceptions import DispatchFailed
from sla_monitor.tools.notifications.interface import DeliveryAdapter
from sla_monitor.utils.jobs import Submission

logger = logging.getLogger(__name__)

OK_STATUSES = ("SENT", "QUEUED")


class EscalationDispatcher:
    def __init__(self, adapter: DeliveryAdapter, channels: Optional[Iterable[str]] = None, recipients: Optional[Dict[str, str]] = None):
        self.adapter = adapter
        self.channels = list(channels or ["email"])
        self.recipients = recipients or {}

    def _payload(self, submission: Submission) -> Dict[str, Any]:
        return {
            "template": "sla_escalation",
            "submission_id": submission.id,
            "category": submission.category,
            "received_at": submission.received_at.isoformat(),
            "sla_days": submission.sla_days,
            "subject": f"SLA breached for submission {submission.id}",
        }

    def notify(self, submission: Submission) -> None:
        payload = self._payload(submission)
        for channel in self.channels:
            meta = {
                "dedupe_key": f"sla-escalation:{submission.id}:{submission.escalation_count}",
                "to": self.recipients.get(channel),
            }
            try:
                result = self.adapter.send(channel, payload, meta)
            except Exception as e:
                raise DispatchFailed(f"{channel} delivery for {submission.id} failed: {e}") from e
            status = str((result or {}).get("status", "")).upper()
            if status not in OK_STATUSES:
                raise DispatchFailed(f"{channel} delivery for {submission.id} returned {status or 'no status'}")
            logger.debug("escalation %s sent via %s (%s)", submission.id, channel, status)


__all__ = ["EscalationDispatcher"]

"""In-memory submission store.

Test/local backend implementing the SubmissionStore contract. Rows are kept
as plain dicts (the same shape a relational store hands back) and validated
into `Submission` objects on every read, so a malformed row surfaces as a
ValidationError exactly as it would from Supabase. Guarded by a lock so
several workers in one process can share it.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from sla_monitor.engine.deadlines import default_sla_days, is_breached
from sla_monitor.exceptions import ValidationError
from sla_monitor.utils.jobs import Submission, SubmissionStatus, utcnow

logger = logging.getLogger(__name__)


class InMemorySubmissionStore:
	def __init__(self) -> None:
		self._rows: Dict[str, Dict[str, Any]] = {}
		self._counter = 1
		self._lock = threading.RLock()

	# Write helpers -----------------------------------------------------
	def add(
		self,
		submission_id: Optional[str] = None,
		received_at: Optional[datetime] = None,
		sla_days: Optional[int] = None,
		category: Optional[str] = None,
		status: SubmissionStatus = SubmissionStatus.OPEN,
		escalation_count: int = 0,
	) -> Submission:
		"""Insert a submission; sla_days falls back to the category default."""
		with self._lock:
			if submission_id is None:
				submission_id = str(self._counter)
				self._counter += 1
			row = {
				"id": submission_id,
				"received_at": received_at or utcnow(),
				"sla_days": sla_days if sla_days is not None else default_sla_days(category),
				"status": SubmissionStatus(status).value,
				"escalation_count": escalation_count,
				"category": category,
			}
			self._rows[submission_id] = row
			return Submission.from_row(row)

	def write_row(self, row: Dict[str, Any]) -> None:
		"""Store a raw row as-is, without validation."""
		with self._lock:
			self._rows[str(row.get("id"))] = dict(row)

	# Read ops ----------------------------------------------------------
	def get_submission(self, submission_id: str) -> Optional[Submission]:
		with self._lock:
			row = self._rows.get(submission_id)
			return Submission.from_row(row) if row is not None else None

	def list_open_submissions_past_deadline(self, now: datetime) -> List[Submission]:
		with self._lock:
			out = []
			for row in self._rows.values():
				if row.get("status") != SubmissionStatus.OPEN.value:
					continue
				try:
					sub = Submission.from_row(row)
				except ValidationError as e:
					logger.warning("skipping invalid submission row: %s", e)
					continue
				if is_breached(sub, now):
					out.append(sub)
			return out

	# Conditional transition -------------------------------------------
	def set_escalated(self, submission_id: str) -> bool:
		with self._lock:
			row = self._rows.get(submission_id)
			if row is None or row.get("status") != SubmissionStatus.OPEN.value:
				return False
			row["status"] = SubmissionStatus.ESCALATED.value
			row["escalation_count"] = int(row.get("escalation_count") or 0) + 1
			return True


__all__ = ["InMemorySubmissionStore"]

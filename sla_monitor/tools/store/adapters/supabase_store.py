"""Supabase submission store.

Implements the SubmissionStore contract over a `submissions` table using the
official Supabase SDK. The adapter is intentionally thin: breach rules live
in the engine, this module only narrows the query and performs the
conditional status update.

Notes
-----
- The OPEN + received_at prefilter is a superset of the breached rows; the
	engine re-applies the exact deadline rule.
- `set_escalated` filters on both status and the escalation_count it read,
	so two workers racing on the same submission cannot both win.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sla_monitor.engine.deadlines import is_breached, to_utc
from sla_monitor.exceptions import StoreUnavailable, ValidationError
from sla_monitor.utils.jobs import Submission, SubmissionStatus

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000
COLUMNS = "id,received_at,sla_days,status,escalation_count,category"


def _rows(resp: Any) -> List[Dict[str, Any]]:
	data = getattr(resp, "data", None) if not isinstance(resp, dict) else resp.get("data")
	return data if isinstance(data, list) else []


class SupabaseSubmissionStore:
	def __init__(self, url: str, key: str, table: str = "submissions", client: Optional[Any] = None):
		if client is None:
			from supabase import create_client

			client = create_client(url, key)
		self.client = client
		self.table = table

	def _query(self):
		return self.client.table(self.table)

	# -------------------------------------------------- Read Ops ----------
	def get_submission(self, submission_id: str) -> Optional[Submission]:
		try:
			resp = self._query().select(COLUMNS).eq("id", submission_id).limit(1).execute()
		except Exception as e:
			raise StoreUnavailable(f"read {self.table}/{submission_id} failed: {e}") from e
		rows = _rows(resp)
		return Submission.from_row(rows[0]) if rows else None

	def list_open_submissions_past_deadline(self, now: datetime) -> List[Submission]:
		# sla_days >= 1, so nothing received on or after yesterday can be breached yet
		today = to_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
		cutoff = (today - timedelta(days=1)).isoformat()
		rows: List[Dict[str, Any]] = []
		start = 0
		while True:
			try:
				resp = (
					self._query()
					.select(COLUMNS)
					.eq("status", SubmissionStatus.OPEN.value)
					.lt("received_at", cutoff)
					.order("received_at")
					.range(start, start + PAGE_SIZE - 1)
					.execute()
				)
			except Exception as e:
				raise StoreUnavailable(f"scan of {self.table} failed: {e}") from e
			page = _rows(resp)
			rows.extend(page)
			if len(page) < PAGE_SIZE:
				break
			start += PAGE_SIZE
		out: List[Submission] = []
		for row in rows:
			try:
				sub = Submission.from_row(row)
			except ValidationError as e:
				logger.warning("skipping invalid submission row: %s", e)
				continue
			if is_breached(sub, now):
				out.append(sub)
		return out

	# -------------------------------------------------- Write Ops ---------
	def set_escalated(self, submission_id: str) -> bool:
		current = self.get_submission(submission_id)
		if current is None or current.status != SubmissionStatus.OPEN:
			return False
		try:
			resp = (
				self._query()
				.update({
					"status": SubmissionStatus.ESCALATED.value,
					"escalation_count": current.escalation_count + 1,
				})
				.eq("id", submission_id)
				.eq("status", SubmissionStatus.OPEN.value)
				.eq("escalation_count", current.escalation_count)
				.execute()
			)
		except Exception as e:
			raise StoreUnavailable(f"update {self.table}/{submission_id} failed: {e}") from e
		updated = bool(_rows(resp))
		if not updated:
			logger.info("submission %s changed concurrently; escalation skipped", submission_id)
		return updated


__all__ = ["SupabaseSubmissionStore"]

import unittest
from datetime import datetime, timezone

from sla_monitor.exceptions import ValidationError
from sla_monitor.utils.jobs import Job, JobOutcome, JobType, OutcomeKind, Submission, SubmissionStatus


class TestJob(unittest.TestCase):
    def test_wire_form_carries_every_field(self):
        job = Job.escalate("s-1")
        d = job.to_dict()
        self.assertEqual(d["type"], "ESCALATE")
        self.assertEqual(d["submission_id"], "s-1")
        self.assertEqual(d["retry_count"], 0)
        back = Job.from_dict(d)
        self.assertEqual(back, job)

    def test_scan_jobs_have_no_submission_id(self):
        self.assertIsNone(Job.scan().to_dict()["submission_id"])
        bad = {**Job.scan().to_dict(), "submission_id": "s-1"}
        with self.assertRaises(ValidationError):
            Job.from_dict(bad)

    def test_escalate_requires_submission_id(self):
        bad = {**Job.escalate("x").to_dict(), "submission_id": None}
        with self.assertRaises(ValidationError):
            Job.from_dict(bad)

    def test_malformed_payloads_are_rejected(self):
        for payload in ({}, {"raw": "not json"}, {**Job.scan().to_dict(), "type": "PURGE"}, {**Job.scan().to_dict(), "retry_count": -1}):
            with self.assertRaises(ValidationError):
                Job.from_dict(payload)

    def test_next_attempt_keeps_identity_and_bumps_retry_count(self):
        job = Job.escalate("s-2")
        nxt = job.next_attempt()
        self.assertEqual(nxt.job_id, job.job_id)
        self.assertEqual(nxt.retry_count, 1)
        self.assertEqual(nxt.type, JobType.ESCALATE)
        self.assertGreaterEqual(nxt.scheduled_at, job.scheduled_at)

    def test_outcome_tags(self):
        self.assertTrue(JobOutcome.success().ok)
        err = RuntimeError("x")
        self.assertEqual(JobOutcome.retryable(err).kind, OutcomeKind.RETRYABLE)
        self.assertIs(JobOutcome.fatal(err).error, err)


class TestSubmissionRow(unittest.TestCase):
    def test_from_row_normalises_values(self):
        sub = Submission.from_row({
            "id": 7,
            "received_at": "2024-03-04T09:30:00",
            "sla_days": 2,
            "status": "open",
            "escalation_count": None,
        })
        self.assertEqual(sub.id, "7")
        self.assertEqual(sub.status, SubmissionStatus.OPEN)
        self.assertEqual(sub.escalation_count, 0)
        self.assertEqual(sub.received_at, datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc))

    def test_missing_or_invalid_fields_raise_validation_error(self):
        base = {"id": "a", "received_at": "2024-03-04T09:30:00Z", "sla_days": 2, "status": "OPEN"}
        for broken in (
            {k: v for k, v in base.items() if k != "received_at"},
            {**base, "sla_days": 0},
            {**base, "status": "PENDING"},
        ):
            with self.assertRaises(ValidationError):
                Submission.from_row(broken)


if __name__ == "__main__":
    unittest.main()

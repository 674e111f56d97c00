from typing import Any, Dict, List, Optional
from datetime import datetime
import logging

from sla_monitor.engine.deadlines import compute_deadline, sla_status
from sla_monitor.engine.sla_engine import SLAEngine
from sla_monitor.exceptions import SLAMonitorError
from sla_monitor.infrastructure.worker.worker import SLAWorker

logger = logging.getLogger(__name__)

ACTIONS = ("check_breaches", "process_escalations", "escalate_submission", "clear_queue")
# actions that push to or drain the worker's queue
QUEUE_ACTIONS = ("check_breaches", "escalate_submission", "clear_queue")


class SLAAdmin:
    """Operator-facing control plane over the engine and worker.

    Every action returns a result descriptor, {'success': True, 'data': ...}
    or {'success': False, 'error': ...}, and performs its side effects at
    most once per call. Permission checks belong to whoever exposes this
    surface.

    With `require_durable_queue`, queue actions are refused unless the
    worker's broker outlives the process. A one-shot CLI over an in-memory
    queue would otherwise report jobs as queued that no consumer ever sees.
    """

    def __init__(self, engine: SLAEngine, worker: SLAWorker, require_durable_queue: bool = False):
        self.engine = engine
        self.worker = worker
        self.require_durable_queue = require_durable_queue

    def execute(self, action: str, submission_id: Optional[str] = None) -> Dict[str, Any]:
        if action not in ACTIONS:
            return {'success': False, 'error': f'unknown action: {action}'}
        if action == 'escalate_submission' and not submission_id:
            return {'success': False, 'error': 'submission_id is required for manual escalation'}
        if action in QUEUE_ACTIONS and self.require_durable_queue and not getattr(self.worker.queue, 'durable', False):
            return {'success': False, 'error': f'{action} needs a durable queue; set SLA_QUEUE_BACKEND=redis'}
        try:
            if action == 'check_breaches':
                data = self.check_breaches()
            elif action == 'process_escalations':
                data = self.process_escalations()
            elif action == 'escalate_submission':
                data = self.escalate_submission(submission_id)
            else:
                data = self.clear_queue()
        except SLAMonitorError as e:
            logger.warning('admin action %s failed: %s', action, e)
            return {'success': False, 'error': str(e)}
        return {'success': True, 'data': data}

    def check_breaches(self) -> Dict[str, Any]:
        """Report current breaches and queue a SCAN so the worker escalates them."""
        actions = self.engine.check_breaches()
        job = self.worker.trigger_scan()
        return {
            'breaches': [a.submission_id for a in actions],
            'count': len(actions),
            'scan_job_id': job['job_id'],
        }

    def process_escalations(self) -> Dict[str, Any]:
        summary = self.engine.process_escalations()
        summary['message'] = 'Escalations processed'
        return summary

    def escalate_submission(self, submission_id: str) -> Dict[str, Any]:
        job = self.worker.enqueue_escalation(submission_id)
        return {'message': f'Escalation queued for submission {submission_id}', 'job_id': job['job_id']}

    def clear_queue(self) -> Dict[str, Any]:
        cleared = self.worker.clear_queue()
        return {'cleared': cleared, 'message': f'Cleared {cleared} jobs from queue'}

    def overview(self, now: Optional[datetime] = None, limit: int = 10) -> Dict[str, Any]:
        """Overdue count, the `limit` most overdue submissions, and worker status."""
        now = now or self.engine.clock()
        overdue = self.engine.store.list_open_submissions_past_deadline(now)
        overdue.sort(key=lambda s: compute_deadline(s.received_at, s.sla_days))
        top: List[Dict[str, Any]] = []
        for sub in overdue[:limit]:
            top.append({
                'id': sub.id,
                'category': sub.category,
                'deadline': compute_deadline(sub.received_at, sub.sla_days).isoformat(),
                'sla': sla_status(sub, now),
            })
        return {
            'overdue_count': len(overdue),
            'overdue_submissions': top,
            'worker': self.worker.get_status(),
        }


__all__ = ["ACTIONS", "QUEUE_ACTIONS", "SLAAdmin"]

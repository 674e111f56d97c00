import logging
import threading
import time
from typing import Any, Dict, Optional

import platform_monitoring

from sla_monitor.audit.store import (
    JOB_DROPPED,
    JOB_FAILED,
    JOB_RETRIED,
    JOB_SUCCEEDED,
    build_event,
    record_safely,
)
from sla_monitor.config.settings import WorkerConfig
from sla_monitor.engine.sla_engine import SLAEngine
from sla_monitor.exceptions import BrokerUnavailable, RetriesExhausted, SLAMonitorError, ValidationError
from sla_monitor.infrastructure.interfaces import AuditRecorder, QueueBroker
from sla_monitor.infrastructure.worker.scheduler import RepeatingTimer
from sla_monitor.utils.jobs import Job, JobOutcome, JobType, OutcomeKind, utcnow

logger = logging.getLogger(__name__)

_PROCESS_STARTED = time.monotonic()


def retry_delay(retry_count: int, base_delay: float) -> float:
    """Delay before re-pushing a job that failed on attempt `retry_count` (0-based).

    Linear in the attempt number: base, 2*base, 3*base, ...
    """
    return base_delay * (retry_count + 1)


class SLAWorker:
    """Worker that schedules breach scans and consumes SCAN/ESCALATE jobs.

    Responsibilities:
    - push a SCAN job every `check_interval_minutes` while running
    - pop one job at a time and dispatch it to the engine
    - requeue retryable failures after a deferred, linearly growing delay
    - drop fatal or exhausted jobs, with an audit event for every outcome
    - report status for the admin surface

    Lifecycle is STOPPED -> RUNNING -> STOPPED; redundant start()/stop()
    calls are logged no-ops. Instances share nothing, so several workers may
    run against one queue in the same process.
    """

    def __init__(
        self,
        queue: QueueBroker,
        engine: SLAEngine,
        config: Optional[WorkerConfig] = None,
        audit: Optional[AuditRecorder] = None,
    ):
        self.queue = queue
        self.engine = engine
        self.config = config or WorkerConfig()
        self.audit = audit
        self._lock = threading.Lock()
        self._running = False
        self._stop = threading.Event()
        self._consumer: Optional[threading.Thread] = None
        self._timer: Optional[RepeatingTimer] = None
        self._pending_retries: Dict[str, tuple] = {}
        self._stats = {"processed": 0, "succeeded": 0, "retried": 0, "failed": 0, "dropped": 0}

    @property
    def queue_name(self) -> str:
        return self.config.queue_name

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------ lifecycle
    def start(self) -> bool:
        with self._lock:
            if self._running:
                logger.info("worker on %s already running; start ignored", self.queue_name)
                return False
            self._running = True
            self._stop = threading.Event()
            stop = self._stop
            self._timer = RepeatingTimer(
                self.config.check_interval_minutes * 60,
                self._scheduled_scan,
                stop_event=stop,
                name=f"sla-scan-timer[{self.queue_name}]",
            )
            self._consumer = threading.Thread(
                target=self._run_loop, args=(stop,), name=f"sla-consumer[{self.queue_name}]", daemon=True
            )
        self._timer.start()
        self._consumer.start()
        if self.config.metrics_port:
            try:
                platform_monitoring.start_metrics_server(self.config.metrics_port)
            except OSError as e:
                logger.warning("metrics exporter not started on :%s: %s", self.config.metrics_port, e)
        platform_monitoring.log_event("worker.start", {"queue": self.queue_name, "config": self.config.to_dict()})
        return True

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> bool:
        """Stop scheduling and consuming. The job in flight, if any, finishes first.

        Deferred retries are pushed back onto the queue once the consumer has
        exited, so none is lost and none is picked up by the exiting consumer.
        """
        with self._lock:
            if not self._running:
                logger.info("worker on %s already stopped; stop ignored", self.queue_name)
                return False
            self._running = False
            self._stop.set()
            timer, consumer = self._timer, self._consumer
        if timer:
            timer.cancel(timeout=timeout)
        if wait and consumer and consumer is not threading.current_thread():
            consumer.join(timeout=timeout)
        # a consumer still running flushes on its own way out, after its last pop
        if consumer is None or not consumer.is_alive():
            self._flush_pending_retries()
        platform_monitoring.log_event("worker.stop", {"queue": self.queue_name})
        return True

    def join(self, timeout: Optional[float] = None) -> None:
        consumer = self._consumer
        if consumer and consumer is not threading.current_thread():
            consumer.join(timeout=timeout)

    def _run_loop(self, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                self.run_once(timeout=self.config.pop_timeout)
            except BrokerUnavailable as e:
                logger.warning("queue %s unavailable: %s", self.queue_name, e)
                stop.wait(self.config.pop_timeout)
            except Exception:
                logger.exception("worker loop error on %s", self.queue_name)
        self._flush_pending_retries()

    def _scheduled_scan(self) -> None:
        self.trigger_scan()

    # ------------------------------------------------------------------ producers
    def _push(self, job: Job) -> Dict[str, Any]:
        payload = job.to_dict()
        self.queue.push(self.queue_name, payload)
        return payload

    def trigger_scan(self) -> Dict[str, Any]:
        """Enqueue a SCAN job now."""
        return self._push(Job.scan())

    def enqueue_escalation(self, submission_id: str) -> Dict[str, Any]:
        if not submission_id:
            raise ValidationError("submission_id is required")
        return self._push(Job.escalate(submission_id))

    # ------------------------------------------------------------------ consumer
    def run_once(self, timeout: Optional[float] = None) -> Optional[JobOutcome]:
        """Pop and process at most one job. Returns its outcome, or None on timeout."""
        item = self.queue.blocking_pop(self.queue_name, self.config.pop_timeout if timeout is None else timeout)
        if item is None:
            return None
        return self.process(item)

    def process(self, item: Dict[str, Any]) -> JobOutcome:
        try:
            job = Job.from_dict(item)
        except ValidationError as e:
            logger.error("dropping malformed job on %s: %s", self.queue_name, e)
            self._bump("processed", "failed")
            record_safely(self.audit, build_event(JOB_FAILED, None, error=e, retry_count=item.get("retry_count", 0) if isinstance(item, dict) else 0))
            return JobOutcome.fatal(e)

        platform_monitoring.log_event("worker.job.start", {"job_id": job.job_id, "type": job.type.value, "submission_id": job.submission_id, "retry_count": job.retry_count})
        outcome = self.handle(job)
        self._settle(job, outcome)
        return outcome

    def handle(self, job: Job) -> JobOutcome:
        """Run the handler for `job` and translate any error into a JobOutcome."""
        try:
            if job.type == JobType.SCAN:
                return self._handle_scan(job)
            return self._handle_escalate(job)
        except SLAMonitorError as e:
            return JobOutcome.retryable(e) if e.retryable else JobOutcome.fatal(e)
        except Exception as e:
            # unknown errors are assumed transient
            return JobOutcome.retryable(e)

    def _handle_scan(self, job: Job) -> JobOutcome:
        actions = self.engine.check_breaches()
        for action in actions:
            self._push(Job.escalate(action.submission_id))
        return JobOutcome.success(breaches=len(actions))

    def _handle_escalate(self, job: Job) -> JobOutcome:
        transitioned = self.engine.escalate(job.submission_id)
        return JobOutcome.success(transitioned=transitioned)

    # ------------------------------------------------------------------ outcomes
    def _settle(self, job: Job, outcome: JobOutcome) -> None:
        latency = (utcnow() - job.scheduled_at).total_seconds()
        platform_monitoring.observe_job(self.queue_name, job.type.value, outcome.kind.value, latency)

        if outcome.kind == OutcomeKind.SUCCESS:
            self._bump("processed", "succeeded")
            platform_monitoring.log_event("worker.job.success", {"job_id": job.job_id, **outcome.detail})
            record_safely(self.audit, build_event(JOB_SUCCEEDED, job, **outcome.detail))
            return

        platform_monitoring.log_event("worker.job.error", {"job_id": job.job_id, "kind": outcome.kind.value, "error": str(outcome.error)})

        if outcome.kind == OutcomeKind.FATAL:
            self._bump("processed", "failed")
            record_safely(self.audit, build_event(JOB_FAILED, job, error=outcome.error))
            return

        if job.retry_count < self.config.max_retries:
            delay = retry_delay(job.retry_count, self.config.retry_base_delay)
            nxt = job.next_attempt()
            self._bump("processed", "retried")
            record_safely(self.audit, build_event(JOB_RETRIED, nxt, error=outcome.error, delay_seconds=delay))
            self._schedule_retry(nxt, delay)
            return

        exhausted = RetriesExhausted(
            f"{job.type.value} job {job.job_id} failed after {job.retry_count} retries",
            retry_count=job.retry_count,
            last_error=str(outcome.error),
        )
        logger.error("%s; last error: %s", exhausted, outcome.error)
        self._bump("processed", "dropped")
        record_safely(self.audit, build_event(JOB_DROPPED, job, error=outcome.error, reason=type(exhausted).__name__))

    def _bump(self, *keys: str) -> None:
        with self._lock:
            for k in keys:
                self._stats[k] += 1

    # ------------------------------------------------------------------ retries
    def _schedule_retry(self, job: Job, delay: float) -> None:
        if delay <= 0:
            self._requeue(job)
            return
        timer = threading.Timer(delay, self._fire_retry, args=(job.job_id,))
        timer.daemon = True
        with self._lock:
            self._pending_retries[job.job_id] = (timer, job)
        timer.start()

    def _fire_retry(self, job_id: str) -> None:
        with self._lock:
            entry = self._pending_retries.pop(job_id, None)
        if entry:
            self._requeue(entry[1])

    def _flush_pending_retries(self) -> None:
        """Push every deferred retry now so none is lost when the worker stops."""
        with self._lock:
            pending = list(self._pending_retries.values())
            self._pending_retries.clear()
        for timer, job in pending:
            timer.cancel()
            self._requeue(job)

    def _requeue(self, job: Job) -> None:
        try:
            self._push(job)
        except BrokerUnavailable as e:
            logger.error("requeue of job %s failed: %s", job.job_id, e)
            self._bump("dropped")
            record_safely(self.audit, build_event(JOB_DROPPED, job, error=e, reason="requeue_failed"))

    # ------------------------------------------------------------------ observability
    def get_status(self) -> Dict[str, Any]:
        try:
            length: Optional[int] = self.queue.length(self.queue_name)
            platform_monitoring.set_queue_length(self.queue_name, length)
        except BrokerUnavailable as e:
            logger.warning("queue length unavailable: %s", e)
            length = None
        with self._lock:
            stats = dict(self._stats)
            pending = len(self._pending_retries)
            running = self._running
        return {
            "is_running": running,
            "queue_length": length,
            "config": self.config.to_dict(),
            "uptime_seconds": round(time.monotonic() - _PROCESS_STARTED, 3),
            "stats": stats,
            "pending_retries": pending,
        }

    def clear_queue(self) -> int:
        """Maintenance only: drop every pending job and return how many were removed."""
        removed = self.queue.clear(self.queue_name)
        platform_monitoring.log_event("worker.queue.cleared", {"queue": self.queue_name, "removed": removed})
        return removed


__all__ = ["SLAWorker", "retry_delay"]

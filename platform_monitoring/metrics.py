"""Prometheus metrics for the SLA worker.

Collectors are process-wide (prometheus_client's default registry) and
labelled by queue, so several worker instances in one process report into
the same series. Per-instance counters for status reporting live on the
worker itself.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger('platform_monitoring')

JOBS_TOTAL = Counter(
    'sla_worker_jobs_total',
    'Jobs handled by SLA workers, by type and outcome',
    ['queue', 'job_type', 'outcome'],
)
JOB_LATENCY = Histogram(
    'sla_worker_job_latency_seconds',
    'Seconds between a job being scheduled and finishing processing',
    ['queue', 'job_type'],
    buckets=(0.1, 0.5, 1, 5, 15, 60, 300, 900, 3600),
)
QUEUE_LENGTH = Gauge('sla_worker_queue_length', 'Pending jobs last observed on the queue', ['queue'])
BREACHES_FOUND = Counter('sla_breaches_detected_total', 'Breached submissions found by scans')

_server_lock = threading.Lock()
_server_port: Optional[int] = None


def observe_job(queue: str, job_type: str, outcome: str, latency_seconds: float | None = None) -> None:
    JOBS_TOTAL.labels(queue=queue, job_type=job_type, outcome=outcome).inc()
    if latency_seconds is not None and latency_seconds >= 0:
        JOB_LATENCY.labels(queue=queue, job_type=job_type).observe(latency_seconds)


def set_queue_length(queue: str, length: int) -> None:
    QUEUE_LENGTH.labels(queue=queue).set(length)


def start_metrics_server(port: int) -> bool:
    """Expose /metrics on `port` once per process. Returns False if already running."""
    global _server_port
    with _server_lock:
        if _server_port is not None:
            return False
        start_http_server(port)
        _server_port = port
    logger.info('metrics exporter listening on :%s', port)
    return True

"""Top-level platform monitoring helpers.

Usage: from platform_monitoring import log_event, observe_job
"""
from .exporters import log_event, sanitize
from .metrics import observe_job, set_queue_length, start_metrics_server, BREACHES_FOUND

__all__ = ["log_event", "sanitize", "observe_job", "set_queue_length", "start_metrics_server", "BREACHES_FOUND"]

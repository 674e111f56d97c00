"""Central configuration for Redis queue keys.

All values can be overridden by environment variables.
"""
from __future__ import annotations

import os

NAMESPACE = os.getenv("REDIS_NAMESPACE", "sla")

# Logical queue name (without namespace prefix)
QUEUE_JOBS = os.getenv("SLA_QUEUE_NAME", "sla:jobs")


def queue_key(queue_name: str, namespace: str | None = None) -> str:
    """Redis list key backing a logical queue."""
    ns = NAMESPACE if namespace is None else namespace
    return f"{ns}:queue:{queue_name}" if ns else f"queue:{queue_name}"


__all__ = ["NAMESPACE", "QUEUE_JOBS", "queue_key"]

import os
from typing import Optional

from sla_monitor.infrastructure.interfaces import QueueBroker

from .adapters.redis_list_queue import RedisListQueueBroker
from .in_memory import InMemoryQueueBroker


def build_queue(backend: Optional[str] = None) -> QueueBroker:
    """Return a broker for `backend` ('memory' or 'redis'), defaulting to SLA_QUEUE_BACKEND."""
    backend = (backend or os.environ.get("SLA_QUEUE_BACKEND") or "memory").lower()
    if backend == "redis":
        return RedisListQueueBroker()
    if backend == "memory":
        return InMemoryQueueBroker()
    raise ValueError(f"unknown queue backend: {backend}")


__all__ = ["build_queue"]

from collections import deque
import copy
import threading
import time
from typing import Any, Deque, Dict, Optional

from sla_monitor.infrastructure.interfaces import QueueBroker


class InMemoryQueueBroker(QueueBroker):
    """Thread-safe in-memory broker for local development and tests.

    Jobs are deep-copied on the way in so a caller mutating its dict after a
    push cannot change what a consumer later pops, matching the behaviour of
    a serialising broker.
    """

    durable = False

    def __init__(self):
        self._queues: Dict[str, Deque[Dict[str, Any]]] = {}
        self._cond = threading.Condition()

    def _ensure_queue(self, queue_name: str) -> Deque[Dict[str, Any]]:
        if queue_name not in self._queues:
            self._queues[queue_name] = deque()
        return self._queues[queue_name]

    def push(self, queue_name: str, job: Dict[str, Any]) -> None:
        with self._cond:
            self._ensure_queue(queue_name).append(copy.deepcopy(job))
            self._cond.notify_all()

    def blocking_pop(self, queue_name: str, timeout: float) -> Optional[Dict[str, Any]]:
        end = time.monotonic() + max(0.0, timeout)
        with self._cond:
            q = self._ensure_queue(queue_name)
            while not q:
                remaining = end - time.monotonic()
                if remaining <= 0:
                    return None
                self._cond.wait(timeout=remaining)
            return q.popleft()

    def length(self, queue_name: str) -> int:
        with self._cond:
            return len(self._ensure_queue(queue_name))

    def clear(self, queue_name: str) -> int:
        with self._cond:
            q = self._ensure_queue(queue_name)
            removed = len(q)
            q.clear()
            return removed

    def peek(self, queue_name: str) -> Optional[Dict[str, Any]]:
        """Test helper: head of the queue without removing it."""
        with self._cond:
            q = self._ensure_queue(queue_name)
            return copy.deepcopy(q[0]) if q else None


__all__ = ["InMemoryQueueBroker"]

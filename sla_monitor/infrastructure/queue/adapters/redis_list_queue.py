from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import redis

from sla_monitor.exceptions import BrokerUnavailable
from sla_monitor.infrastructure.interfaces import QueueBroker
from sla_monitor.tools.redis import config as rconf
from sla_monitor.tools.redis.client import build_redis_client

logger = logging.getLogger(__name__)


class RedisListQueueBroker(QueueBroker):
    """Redis list implementation of QueueBroker.

    - One list per queue: `<ns>:queue:<queue_name>`
    - push = RPUSH, blocking_pop = BLPOP, so the head is the oldest job
    - Jobs stored as compact JSON strings
    - Any RedisError surfaces as BrokerUnavailable
    """

    durable = True

    def __init__(self, client: Optional["redis.Redis"] = None, namespace: Optional[str] = None):
        self.client = client if client is not None else build_redis_client()
        self.ns = rconf.NAMESPACE if namespace is None else namespace

    def _key(self, queue_name: str) -> str:
        return rconf.queue_key(queue_name, self.ns)

    def push(self, queue_name: str, job: Dict[str, Any]) -> None:
        payload = json.dumps(job, separators=(",", ":"), default=str)
        try:
            self.client.rpush(self._key(queue_name), payload)
        except redis.exceptions.RedisError as e:
            raise BrokerUnavailable(f"push to {queue_name} failed: {e}") from e

    def blocking_pop(self, queue_name: str, timeout: float) -> Optional[Dict[str, Any]]:
        key = self._key(queue_name)
        try:
            if timeout <= 0:
                # BLPOP with 0 blocks forever
                raw = self.client.lpop(key)
            else:
                res = self.client.blpop([key], timeout=timeout)
                raw = res[1] if res else None
        except redis.exceptions.RedisError as e:
            raise BrokerUnavailable(f"pop from {queue_name} failed: {e}") from e
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("undecodable job on %s: %r", key, raw)
            return {"raw": raw}

    def length(self, queue_name: str) -> int:
        try:
            return int(self.client.llen(self._key(queue_name)))
        except redis.exceptions.RedisError as e:
            raise BrokerUnavailable(f"length of {queue_name} failed: {e}") from e

    def clear(self, queue_name: str) -> int:
        key = self._key(queue_name)
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.llen(key)
            pipe.delete(key)
            removed, _ = pipe.execute()
        except redis.exceptions.RedisError as e:
            raise BrokerUnavailable(f"clear of {queue_name} failed: {e}") from e
        return int(removed or 0)

    def peek(self, queue_name: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self.client.lindex(self._key(queue_name), 0)
        except redis.exceptions.RedisError as e:
            raise BrokerUnavailable(f"peek of {queue_name} failed: {e}") from e
        return json.loads(raw) if raw else None


__all__ = ["RedisListQueueBroker"]

"""Redis connection factory.

Environment variables supported:
- REDIS_URL: full connection URL (preferred; rediss:// enables TLS)
- REDIS_HOST (default: localhost)
- REDIS_PORT (default: 6379)
- REDIS_DB (default: 0)
- REDIS_PASSWORD (optional)
- REDIS_SSL_VERIFY (default: true) relax certificate checks for rediss:// when false
"""
from __future__ import annotations

import os
from typing import Optional

import redis


def build_redis_client(
    url: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
) -> "redis.Redis":
    """Return a decode_responses Redis client from explicit args or env."""
    url = url or os.getenv("REDIS_URL")
    if url:
        ssl_kwargs = {}
        if url.startswith("rediss://"):
            verify_env = os.getenv("REDIS_SSL_VERIFY", "true").lower()
            if verify_env in ("0", "false", "no"):
                ssl_kwargs["ssl_cert_reqs"] = None
        return redis.Redis.from_url(url, decode_responses=True, **ssl_kwargs)
    return redis.Redis(
        host=host or os.getenv("REDIS_HOST", "localhost"),
        port=int(port or os.getenv("REDIS_PORT", "6379")),
        db=int(db or os.getenv("REDIS_DB", "0")),
        password=password or os.getenv("REDIS_PASSWORD"),
        decode_responses=True,
    )


__all__ = ["build_redis_client"]

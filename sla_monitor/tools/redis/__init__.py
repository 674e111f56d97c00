"""Redis tooling package: connection factory and key configuration.

Modules
-------
- client: build_redis_client (URL or host/port envs, TLS via rediss://)
- config: namespace and queue key helpers
"""

from .client import build_redis_client  # noqa: F401

"""Runtime settings for the SLA worker.

Values come from the environment (a local `.env` is loaded first).

Environment:
* SLA_CHECK_INTERVAL_MINUTES -> minutes between scheduled breach scans (15)
* SLA_POP_TIMEOUT            -> seconds a consumer blocks on the queue (10)
* SLA_MAX_RETRIES            -> requeues allowed per job before it is dropped (3)
* SLA_RETRY_BASE_DELAY       -> seconds; attempt n waits base * n (5)
* SLA_QUEUE_NAME             -> logical queue name (sla:jobs)
* SLA_QUEUE_BACKEND          -> memory | redis
* SLA_METRICS_PORT           -> expose Prometheus metrics when set
* SUPABASE_URL / SUPABASE_KEY, SLA_SUBMISSIONS_TABLE, SLA_AUDIT_TABLE
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SUBMISSIONS_TABLE = os.getenv("SLA_SUBMISSIONS_TABLE", "submissions")
AUDIT_TABLE = os.getenv("SLA_AUDIT_TABLE", "audit_logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


@dataclass(frozen=True)
class WorkerConfig:
    check_interval_minutes: float = 15
    pop_timeout: float = 10.0
    max_retries: int = 3
    retry_base_delay: float = 5.0
    queue_name: str = "sla:jobs"
    metrics_port: Optional[int] = None

    def __post_init__(self):
        if self.check_interval_minutes <= 0:
            raise ValueError("check_interval_minutes must be positive")
        if self.pop_timeout <= 0:
            raise ValueError("pop_timeout must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_base_delay < 0:
            raise ValueError("retry_base_delay must be >= 0")

    @classmethod
    def from_env(cls) -> "WorkerConfig":
        port = os.getenv("SLA_METRICS_PORT")
        return cls(
            check_interval_minutes=_float_env("SLA_CHECK_INTERVAL_MINUTES", 15),
            pop_timeout=_float_env("SLA_POP_TIMEOUT", 10.0),
            max_retries=_int_env("SLA_MAX_RETRIES", 3),
            retry_base_delay=_float_env("SLA_RETRY_BASE_DELAY", 5.0),
            queue_name=os.getenv("SLA_QUEUE_NAME", "sla:jobs"),
            metrics_port=int(port) if port else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_keys(raise_on_missing: bool = False) -> List[str]:
    missing = []
    if not SUPABASE_URL:
        missing.append('SUPABASE_URL')
    if not SUPABASE_KEY:
        missing.append('SUPABASE_KEY')
    if missing and raise_on_missing:
        raise EnvironmentError(f"Missing required env vars: {', '.join(missing)}")
    return missing


__all__ = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUBMISSIONS_TABLE",
    "AUDIT_TABLE",
    "LOG_LEVEL",
    "WorkerConfig",
    "validate_keys",
]

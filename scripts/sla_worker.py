"""SLA Worker runner

Runs a breach-scan scheduler plus a queue consumer until interrupted.

Environment (see sla_monitor.config.settings for the full list):
  SLA_STORE_KIND=supabase|memory   submission/audit backend (default: supabase)
  SLA_QUEUE_BACKEND=redis|memory   queue backend (default: redis with the supabase store, else memory)
  WORKER_ONCE=1                    process a single job and exit
  SCAN_ON_START=1                  enqueue a SCAN job immediately on boot

Usage:
  python scripts/sla_worker.py
  WORKER_ONCE=1 SCAN_ON_START=1 python scripts/sla_worker.py
"""
from __future__ import annotations

import logging
import os
import signal
import sys
import threading
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sla_monitor.config import settings
from sla_monitor.factory import build_services
from sla_monitor.infrastructure.queue import build_queue


def _flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in ("1", "true", "yes")


def main() -> int:
    load_dotenv()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    kind = os.getenv("SLA_STORE_KIND", "supabase")
    backend = os.getenv("SLA_QUEUE_BACKEND") or ("redis" if kind == "supabase" else "memory")
    services = build_services(kind=kind, queue=build_queue(backend))
    worker = services.worker

    if _flag("SCAN_ON_START"):
        worker.trigger_scan()

    if _flag("WORKER_ONCE"):
        outcome = worker.run_once()
        print(f"[SLAWorker] WORKER_ONCE set, outcome={outcome.kind.value if outcome else 'timeout'}")
        return 0

    done = threading.Event()

    def _shutdown(signum, _frame):
        print(f"\n[SLAWorker] signal {signum}, stopping...")
        done.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    worker.start()
    print(f"[SLAWorker] consuming {worker.queue_name}; scan every {worker.config.check_interval_minutes} min")
    done.wait()
    worker.stop(wait=True, timeout=worker.config.pop_timeout + 1)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Run one SLA admin action from the command line.

Actions:
  check_breaches        list current breaches and queue a scan
  process_escalations   scan and escalate in-process (bypasses the queue)
  escalate_submission   queue an escalation for --submission-id
  clear_queue           drop every pending job (maintenance)
  overview              overdue count, most overdue submissions, worker status

Usage:
  python scripts/sla_admin.py overview --limit 5
  python scripts/sla_admin.py escalate_submission --submission-id 42
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sla_monitor.control_layer.sla_admin import ACTIONS
from sla_monitor.factory import build_services
from sla_monitor.infrastructure.queue import build_queue


def main() -> int:
    ap = argparse.ArgumentParser(description="SLA admin actions")
    ap.add_argument("action", choices=list(ACTIONS) + ["overview"])
    ap.add_argument("--submission-id", default=None)
    ap.add_argument("--limit", type=int, default=10, help="overview: how many overdue submissions to list")
    ap.add_argument("--kind", default=os.getenv("SLA_STORE_KIND", "supabase"), choices=["supabase", "memory"])
    args = ap.parse_args()

    # the consumer runs in another process, so queued jobs must live in redis
    queue = build_queue(os.getenv("SLA_QUEUE_BACKEND", "redis"))
    admin = build_services(kind=args.kind, queue=queue, require_durable_queue=True).admin
    if args.action == "overview":
        result = {"success": True, "data": admin.overview(limit=max(1, args.limit))}
    else:
        result = admin.execute(args.action, submission_id=args.submission_id)
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())

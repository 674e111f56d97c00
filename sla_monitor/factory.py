"""Composition helpers: store + dispatcher + audit -> engine -> worker -> admin.

One place decides which backends a process runs against, so scripts and
tests swap `kind='memory'` for `kind='supabase'` without touching callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sla_monitor.audit.store import InMemoryAuditStore, SupabaseAuditStore
from sla_monitor.config import settings
from sla_monitor.config.settings import WorkerConfig
from sla_monitor.control_layer.sla_admin import SLAAdmin
from sla_monitor.engine.sla_engine import SLAEngine
from sla_monitor.infrastructure.interfaces import QueueBroker
from sla_monitor.infrastructure.queue.factory import build_queue
from sla_monitor.infrastructure.worker.worker import SLAWorker
from sla_monitor.tools.notifications import EscalationDispatcher, NoOpDeliveryAdapter
from sla_monitor.tools.notifications.interface import DeliveryAdapter
from sla_monitor.tools.store import InMemorySubmissionStore, SupabaseSubmissionStore


@dataclass
class SLAServices:
    engine: SLAEngine
    worker: SLAWorker
    admin: SLAAdmin


def build_services(
    kind: str = "supabase",
    queue: Optional[QueueBroker] = None,
    delivery: Optional[DeliveryAdapter] = None,
    config: Optional[WorkerConfig] = None,
    require_durable_queue: bool = False,
) -> SLAServices:
    if kind == "supabase":
        settings.validate_keys(raise_on_missing=True)
        store = SupabaseSubmissionStore(settings.SUPABASE_URL, settings.SUPABASE_KEY, table=settings.SUBMISSIONS_TABLE)
        audit = SupabaseAuditStore(settings.SUPABASE_URL, settings.SUPABASE_KEY, table=settings.AUDIT_TABLE)
    elif kind == "memory":
        store = InMemorySubmissionStore()
        audit = InMemoryAuditStore()
    else:
        raise ValueError(f"Unknown store backend kind '{kind}'")

    dispatcher = EscalationDispatcher(delivery or NoOpDeliveryAdapter())
    engine = SLAEngine(store, dispatcher)
    worker = SLAWorker(queue or build_queue(), engine, config=config or WorkerConfig.from_env(), audit=audit)
    return SLAServices(engine=engine, worker=worker, admin=SLAAdmin(engine, worker, require_durable_queue=require_durable_queue))


__all__ = ["SLAServices", "build_services"]

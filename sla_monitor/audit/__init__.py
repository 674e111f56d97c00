from .store import InMemoryAuditStore, SupabaseAuditStore, build_event, record_safely

__all__ = ["InMemoryAuditStore", "SupabaseAuditStore", "build_event", "record_safely"]

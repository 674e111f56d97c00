from .adapters.in_memory_store import InMemorySubmissionStore
from .adapters.supabase_store import SupabaseSubmissionStore

__all__ = ["InMemorySubmissionStore", "SupabaseSubmissionStore"]

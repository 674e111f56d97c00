from .factory import build_queue
from .in_memory import InMemoryQueueBroker

__all__ = ["build_queue", "InMemoryQueueBroker"]

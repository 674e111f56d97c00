from .adapters.noop_adapter import NoOpDeliveryAdapter
from .dispatcher import EscalationDispatcher
from .interface import DeliveryAdapter

__all__ = ["DeliveryAdapter", "EscalationDispatcher", "NoOpDeliveryAdapter"]

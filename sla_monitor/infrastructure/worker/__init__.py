from .scheduler import RepeatingTimer
from .worker import SLAWorker, retry_delay

__all__ = ["RepeatingTimer", "SLAWorker", "retry_delay"]

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Calls `callback` every `interval_seconds` until the stop event is set.

    The stop event is shared with the owner (the worker's running flag), so
    stopping the worker also stops the timer without a separate signal. A
    failing callback is logged and retried on the next tick.
    """

    def __init__(self, interval_seconds: float, callback: Callable[[], None], stop_event: Optional[threading.Event] = None, name: str = "sla-timer"):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval = interval_seconds
        self.callback = callback
        self._stop = stop_event or threading.Event()
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    @property
    def is_alive(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def start(self) -> None:
        if self.is_alive:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        # Event.wait returns True as soon as stop is set, so cancellation is immediate
        while not self._stop.wait(self.interval):
            self.ticks += 1
            try:
                self.callback()
            except Exception:
                logger.exception("%s tick %d failed", self._name, self.ticks)

    def cancel(self, timeout: Optional[float] = 1.0) -> None:
        self._stop.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

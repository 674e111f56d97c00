from typing import Dict, Any, List

from sla_monitor.tools.notifications.interface import DeliveryAdapter


class NoOpDeliveryAdapter(DeliveryAdapter):
    """A no-op delivery adapter for tests and dry-run mode.

    Nothing leaves the process; every call is remembered in `sent` so tests
    can assert on what would have been delivered.
    """

    def __init__(self, disabled: bool = False):
        self.disabled = disabled
        self.sent: List[Dict[str, Any]] = []

    def send(self, channel: str, payload: Dict[str, Any], meta: Dict[str, Any] | None = None) -> Dict[str, Any]:
        if self.disabled:
            return {"status": "DISABLED", "reason": "delivery disabled"}
        self.sent.append({"channel": channel, "payload": payload, "meta": meta})
        return {"status": "SENT", "channel": channel, "provider_id": f"noop-{len(self.sent)}", "meta": meta}


__all__ = ["NoOpDeliveryAdapter"]

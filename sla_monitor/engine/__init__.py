from .deadlines import compute_deadline, default_sla_days, is_breached, sla_status
from .sla_engine import EscalationAction, SLAEngine

__all__ = [
    "EscalationAction",
    "SLAEngine",
    "compute_deadline",
    "default_sla_days",
    "is_breached",
    "sla_status",
]

from .sla_admin import ACTIONS, SLAAdmin

__all__ = ["ACTIONS", "SLAAdmin"]

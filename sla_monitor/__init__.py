"""SLA breach monitor: periodic breach scans, a durable job queue, and an
escalation worker with bounded retries.

Entry points:
- sla_monitor.engine.SLAEngine          breach detection and escalation
- sla_monitor.infrastructure.worker     scheduler + consumer loop
- sla_monitor.control_layer.SLAAdmin    operator actions
- sla_monitor.factory.build_services    wiring from environment settings
"""

__version__ = "0.1.0"

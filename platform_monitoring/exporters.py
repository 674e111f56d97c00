from typing import Dict, Any, Union
import logging
import re

_SECRET_KEY_RE = re.compile(r"(?i)(key|token|secret|authorization|apikey|api_key|password|passwd|bearer)")
# citizen contact details never go to logs
_PII_KEY_RE = re.compile(r"(?i)^(email|phone|mobile|address|to)$")
_SECRET_VAL_RE = re.compile(r"(?i)^(?:sk|ghp|xox|ya29|eyJ|pk_|rk_)[A-Za-z0-9\-\._]{8,}$")
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

REDACTED = "***REDACTED***"


def _mask_value(v: Any) -> Any:
    if not isinstance(v, str):
        return v
    if _SECRET_VAL_RE.search(v.strip()):
        return REDACTED
    if v.lower().startswith("bearer "):
        return "Bearer " + REDACTED
    return _EMAIL_RE.sub(REDACTED, v)


def sanitize(obj: Any) -> Any:
    """Recursively redact secret-like and PII keys/values."""
    if isinstance(obj, dict):
        out: Dict[str, Any] = {}
        for k, v in obj.items():
            if _SECRET_KEY_RE.search(str(k)) or _PII_KEY_RE.search(str(k)):
                out[k] = REDACTED
            else:
                out[k] = sanitize(v)
        return out
    if isinstance(obj, (list, tuple)):
        return [sanitize(x) for x in obj]
    return _mask_value(obj)


logger = logging.getLogger('platform_monitoring')


def log_event(event: Union[str, Dict[str, Any]], payload: Dict[str, Any] | None = None):
    """Log a monitoring event to the central logger.

    Flexible signature supports:
      - log_event({'event': 'name', ...})
      - log_event('name', {...}) (preferred)
    """
    if isinstance(event, str):
        record = {'event': event, **(payload or {})}
    else:
        record = event
    logger.info('MONITOR_EVENT %s', sanitize(record))

"""Structured Logging: JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Every extra={...} field of a record is surfaced in the JSON line
    - Serialization never fails: circular references become "[Circular]",
      unknown objects their str()
    - JSON format in production, human-readable text otherwise
    - setup_logging installs at most one root handler per process
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


def make_serializable(value: Any, _seen: set[int] | None = None) -> Any:
    """Copy value into JSON-safe primitives, cutting reference cycles."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, BaseException):
        return f"{type(value).__name__}: {value}"
    seen = _seen if _seen is not None else set()
    if id(value) in seen:
        return "[Circular]"
    if isinstance(value, dict):
        seen.add(id(value))
        out = {str(k): make_serializable(v, seen) for k, v in value.items()}
    elif isinstance(value, (list, tuple, set, frozenset)):
        seen.add(id(value))
        out = [make_serializable(v, seen) for v in value]
    else:
        return str(value)
    seen.discard(id(value))
    return out


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, val in record.__dict__.items():
            if key not in _RESERVED and val is not None:
                log[key] = make_serializable(val)
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


_HANDLER_NAME = "car_service"


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application.

    Safe to call once per app lifespan: the root handler is installed only
    once per process, later calls just update the level.
    """
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if any(h.get_name() == _HANDLER_NAME for h in logging.root.handlers):
        return
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)

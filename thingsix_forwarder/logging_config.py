"""
Centralized logging configuration for the ThingsIX forwarder.

Call ``setup_logging()`` once from an entry point.  Every other module
should just do::

    import logging
    logger = logging.getLogger(__name__)

No module besides an entry point should call ``logging.basicConfig()``.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _resolve_level(level: Optional[str]) -> str:
    if level:
        return level.upper()
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        return env_level.upper()

    from thingsix_forwarder.config.config_loader import config_loader

    return str(config_loader.get_logging_config().get("level") or "INFO").upper()


def setup_logging(*, level: Optional[str] = None) -> None:
    """Configure the root logger with a JSON formatter on *stdout*.

    Parameters
    ----------
    level:
        Log level name (DEBUG, INFO, WARNING, ...).
        Falls back to the ``LOG_LEVEL`` env-var, then the ``logging.level``
        config value, then ``INFO``.
    """
    resolved_level = _resolve_level(level)

    root = logging.getLogger()
    # Avoid adding duplicate handlers if called more than once.
    if any(isinstance(h, logging.StreamHandler) and
           isinstance(h.formatter, _JSONFormatter) for h in root.handlers):
        root.setLevel(resolved_level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JSONFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved_level)

"""
taskflow.core.logging -- Logging setup for the taskflow loggers.

All taskflow modules log through stdlib loggers under the ``taskflow``
root.  ``configure_logging`` attaches a single stderr handler to that
root, either human-readable or JSON lines.  stdout is left alone
because the stdio MCP transport owns it.

Usage::

    from taskflow.core.logging import configure_logging

    configure_logging(level="DEBUG", structured=True)
"""

from __future__ import annotations

import json
import logging
import sys

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


#: Optional ``extra=`` attributes copied into JSON lines when a record has them.
CONTEXT_FIELDS = ("file_name", "operation_id")


def _component(logger_name: str) -> str:
    """``taskflow.store`` -> ``store``; anything outside taskflow is kept whole."""
    prefix = "taskflow."
    return logger_name[len(prefix):] if logger_name.startswith(prefix) else logger_name


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Besides level, component and message, records logged with
    ``extra={"file_name": ...}`` or ``extra={"operation_id": ...}``
    carry those ids so a document or operation can be followed through
    the log.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S")
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "component": _component(record.name),
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "INFO",
    structured: bool = False,
    logger_name: str = "taskflow",
) -> logging.Logger:
    """Configure the taskflow logging subsystem.

    Parameters
    ----------
    level:
        Log level (``"DEBUG"``, ``"INFO"``, ``"WARNING"``, etc.).
        ``"warn"`` is accepted as an alias for ``"WARNING"``.
    structured:
        When True, records are emitted as JSON lines via
        ``StructuredFormatter``.
    logger_name:
        Root logger name to configure (default ``"taskflow"``).
    """
    name = level.upper()
    if name == "WARN":
        name = "WARNING"

    root = logging.getLogger(logger_name)
    root.setLevel(getattr(logging, name, logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    # Avoid duplicate output when the host application has its own handler.
    root.propagate = False
    return root

"""
Logging for the gpsw engine.

Console output goes through Rich. The long-running commands (`gpsw run`,
`gpsw simulate`) also append JSON lines to `{command}.log` in the working
directory. Per-tracker context (tracker id, commit generation) is attached
with `with_context` and lands as separate JSON keys.
"""

import logging
import sys
import json
from pathlib import Path
from typing import Any, MutableMapping

from rich.logging import RichHandler

CONTEXT_FIELDS = ("tracker_id", "generation")
JSON_LOG_COMMANDS = ("run", "simulate")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record, with any tracker context as top-level keys.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level":     record.levelname,
            "logger":    record.name,
            "thread":    record.threadName,
            "message":   record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        return json.dumps(entry)


class ContextAdapter(logging.LoggerAdapter):
    """
    Adds bound context to every record and tags the console message with it.

    Context passed per call through ``extra=`` is merged over the bound one.
    """
    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        context = {**self.extra, **kwargs.get("extra", {})}
        kwargs["extra"] = context
        tag = " ".join(f"{k}={context[k]}" for k in CONTEXT_FIELDS if context.get(k) is not None)
        return (f"[{tag}] {msg}" if tag else msg), kwargs


def with_context(logger: logging.Logger, **context: Any) -> ContextAdapter:
    """
    Bind tracker context, e.g. ``with_context(logger, tracker_id="Tracker3")``.
    """
    return ContextAdapter(logger, context)


def get_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Return a logger with a Rich console handler, plus the JSON file handler
    when the CLI command is one of JSON_LOG_COMMANDS.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        console_handler = RichHandler(rich_tracebacks=True, show_path=False)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

        command = sys.argv[1] if len(sys.argv) > 1 else None
        if command in JSON_LOG_COMMANDS:
            file_handler = logging.FileHandler(Path.cwd() / f"{command}.log", mode="a", encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)

    return logger

"""
JSONL logging bootstrap.
Attaches a single JSONL sink to the root logger, typically from the CLI.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

DEFAULT_PATH = os.environ.get("STYLEPATH_LOG_PATH", "./stylepath.log.jsonl")
DEFAULT_LEVEL = os.environ.get("STYLEPATH_LOG_LEVEL", "INFO").upper()

# LogRecord attributes that are not worth repeating in the payload
_RESERVED = frozenset(
    {
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
    }
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_payload(self, record: logging.LogRecord) -> dict:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "stylepath.log", "ver": "1.0.0"},
            "logger": record.name,
            "message": record.getMessage(),
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                payload.setdefault(key, value)
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_payload(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | None = None, level: str | None = None) -> None:
    path = path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    # Remove existing handlers of the same kind to avoid duplicates
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
    root.addHandler(JsonlHandler(path))

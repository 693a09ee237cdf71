"""
RICE Prioritizer Logging
========================

Root logger setup shared by the API and the CLI.

Every scoring run logs under a short `run_id` passed through `extra`,
together with counters that are worth aggregating: item count, whether
AI notes were used, LLM usage and cost. Both formatters surface them:

    console: 2025-01-31 10:02:11 INFO    ricerank.orchestrator.pipeline | [3fa9c2d1] Ranked 8 items
    json:    {"ts": "...", "level": "INFO", "run_id": "3fa9c2d1", "msg": "Ranked 8 items", "item_count": 8}

Logs always go to stderr; stdout belongs to CLI output.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Optional

# Structured fields copied from `extra` into JSON lines
RUN_FIELDS = (
    "item_count",
    "ai_used",
    "provider",
    "model",
    "tokens_input",
    "tokens_output",
    "cost_usd",
    "duration",
)

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(run_tag)s%(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "openai")


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines, prefixed with the run id when the record has one."""

    def __init__(self):
        super().__init__(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        run_id = getattr(record, "run_id", None)
        record.run_tag = f"[{run_id}] " if run_id else ""
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, run fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        run_id = getattr(record, "run_id", None)
        if run_id:
            entry["run_id"] = run_id
        entry["msg"] = record.getMessage()

        for key in RUN_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False, log_file: Optional[str] = None):
    """
    Configure the root logger.

    Args:
        level: Root log level name; unknown names fall back to INFO
        json_output: JSON lines instead of console lines
        log_file: Also write to this file, rotated at LOG_FILE_MAX_BYTES
    """
    formatter = JSONFormatter() if json_output else ConsoleFormatter()

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS,
        ))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

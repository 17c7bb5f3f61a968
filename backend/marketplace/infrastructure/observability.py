"""Structured Logging — one root handler, JSON lines in production.

Invariants:
    - Every JSON line carries timestamp, level, logger and message
    - Marketplace context passed via `extra=` (item_id, address, transaction_hash,
      error_code, ...) is copied onto the line only when set
    - setup_logging owns exactly one root handler: repeated lifespans replace it
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_FIELDS = (
    "item_id", "address", "transaction_hash", "balance_source",
    "error_code", "attempt",
    "method", "path", "status_code", "duration_ms",
)
_HANDLER_NAME = "marketplace"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(
            (key, getattr(record, key))
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the marketplace root handler. Returns it."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    )
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

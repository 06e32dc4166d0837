"""Structured Logging — request-error records rendered as JSON, compact or verbose.

Invariants:
    - Every record carries timestamp, level, logger, and message
    - Request fields (url, method, client) nest under "request"; error fields
      (status, category, type, message, at) nest under "error"; absent ones are omitted
    - Compact mode: one line, no trace. Verbose mode: indented, trace included
    - One log call renders as exactly one JSON document

Design Decisions:
    - Verbosity follows Settings.production, picked once in setup_logging
    - Stdlib logging + json: the record shape is small and fixed
"""

import json
import logging
from datetime import datetime, timezone

REQUEST_FIELDS = {"url": "url", "method": "method", "client": "client"}
ERROR_FIELDS = {
    "status": "status",
    "category": "category",
    "error_type": "type",
    "error_message": "message",
    "at": "at",
}


def _collect(record: logging.LogRecord, fields: dict[str, str]) -> dict:
    found = {}
    for attr, key in fields.items():
        val = getattr(record, attr, None)
        if val is not None:
            found[key] = val
    return found


class JSONFormatter(logging.Formatter):
    """Render a record as a JSON document; `verbose` adds indentation and the trace."""

    def __init__(self, *, verbose: bool = False):
        super().__init__()
        self.verbose = verbose

    def format(self, record: logging.LogRecord) -> str:
        doc = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request = _collect(record, REQUEST_FIELDS)
        if request:
            doc["request"] = request
        error = _collect(record, ERROR_FIELDS)
        if error:
            doc["error"] = error
        if self.verbose and record.exc_info:
            doc["exception"] = self.formatException(record.exc_info)
        if self.verbose:
            return json.dumps(doc, ensure_ascii=False, default=str, indent=2)
        return json.dumps(doc, ensure_ascii=False, default=str, separators=(",", ":"))


def setup_logging(level: str = "INFO", fmt: str = "json", production: bool = False):
    """Install a stderr handler on the root logger; returns the handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter(verbose=not production))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler

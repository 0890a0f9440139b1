"""Structured logging configuration for the Solar Structure Estimator."""
import json
import logging
import sys
from datetime import datetime, timezone

# Extra record attributes copied into the JSON payload when present
_EXTRA_FIELDS = ("calculation_id", "stage", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for embedding services."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        return json.dumps(log_entry)


def setup_logging(level: str = "INFO", json_output: bool = True):
    """Configure the ``solar.*`` loggers (the host application's root logger is left alone)."""
    root = logging.getLogger("solar")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]
    return root

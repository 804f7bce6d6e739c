"""Structured logging for mesoplan.

``MESOPLAN_LOG_FORMAT`` selects "json" (default, one object per line) or
"text". Planner modules attach context through ``extra={"mesoplan_...": ...}``
(plan id, muscle group, generation); only those keys reach the JSON output.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import IO

EXTRA_PREFIX = "mesoplan_"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        entry.update(
            (key, value) for key, value in vars(record).items() if key.startswith(EXTRA_PREFIX)
        )
        return json.dumps(entry, default=str)


def setup_logging(log_format: str, level: int | str = logging.INFO, stream: IO[str] | None = None) -> None:
    """Replace the root handlers with one stream handler in the chosen format."""
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)

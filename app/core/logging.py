"""Logging setup for course-progress-service.

ONE HANDLER, TWO FORMATS
------------------------
Everything goes to stdout through a single handler on the root logger.  The
container runtime collects stdout, so the service never opens log files.

  _ContainerFormatter  one readable line per record, for a terminal:

    2026-03-01T12:00:00.123+0000 INFO     app.services.scoring  Quiz submitted score=2/3

  _JsonFormatter       one JSON object per line (LOG_JSON=true), for a log
                       pipeline that indexes fields:

    {"level": "INFO", "message": "Quiz submitted score=2/3",
     "request_id": "5b0e...", "student_id": "9c41...", "week_id": "e2d7..."}

With JSON lines a question like "every unlock check for this student today"
is a field filter in the log UI instead of a regex over free text.

WHERE THE FIELDS COME FROM
--------------------------
request_id
    Held in ``request_id_var`` for the lifetime of one request (set by
    RequestContextMiddleware).  RequestContextFilter sits on the handler,
    not on the root logger: logger-level filters only see records logged
    on that exact logger, while a handler sees every record that
    propagates up from ``app.*``.

method, path, status_code, duration_ms, user_id
    Passed with ``extra=`` on the one summary line the middleware writes
    per request.

student_id, week_id, submission_id, phase_number
    Passed with ``extra=`` by services at the points where progress
    changes, so a student's path through the course can be reconstructed
    from logs alone.

Passwords, password hashes and tokens are never passed to a logger.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar

# "-" outside a request (startup, seeding, background work)
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestContextFilter(logging.Filter):
    """Copies the current request ID onto every record the handler emits."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter for container stdout.

    WARNING and above get a ``[file:line]`` suffix; tracebacks are appended
    when the record carries exc_info.
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        ms = int(record.msecs)
        # offset is the trailing +HHMM
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """JSON-lines formatter with request and domain context promoted."""

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "user_id",
        "status_code",
        "duration_ms",
    )

    _DOMAIN_FIELDS = (
        "student_id",
        "week_id",
        "submission_id",
        "phase_number",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS + self._DOMAIN_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level_name: debug/info/warning/error; unknown names fall back to INFO.
        json_format: emit JSON lines instead of the human-readable format.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in (
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpcore",
        "httpx",
        "sqlalchemy.engine",
    ):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

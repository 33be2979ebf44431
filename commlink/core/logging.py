"""
Logging setup for the CommLink service.

Console output is plain text during development and one JSON object per line
in production. Setting LOG_DIR adds rotating files for the full log and for
warnings and above. HTTP requests are tagged with a request id that every
record emitted while the request is in flight carries along.
"""
import json
import logging
import logging.config
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request, Response

_request_id: ContextVar[str] = ContextVar("request_id", default="system")

# Attributes present on every LogRecord; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class RequestIdFilter(logging.Filter):
    """Stamp records with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """
    Emit records as JSON when ``json_output`` is set, plain text otherwise.

    Fields passed through ``extra`` (HTTP method, path, status, duration) are
    copied into the JSON object next to the standard fields.
    """

    def __init__(self, *args: Any, json_output: Optional[bool] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        if json_output is None:
            from commlink.core.config import settings

            json_output = settings.ENVIRONMENT.lower() == "production"
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        if not self.json_output:
            return super().format(record)

        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "system"),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _rotating_file(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "text",
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUPS,
        "encoding": "utf-8",
        "filters": ["request_id"],
    }


def build_logging_config(level: str, fmt: str, log_dir: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the mapping handed to ``logging.config.dictConfig``.

    Args:
        level: Level for the root and ``commlink`` loggers.
        fmt: Format string of the text formatters.
        log_dir: Directory for rotating log files; console only when None.
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "structured",
            "stream": "ext://sys.stdout",
            "filters": ["request_id"],
        },
    }
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers["file"] = _rotating_file(directory / "commlink.log", "INFO")
        handlers["error_file"] = _rotating_file(directory / "error.log", "WARNING")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "structured": {"()": JsonFormatter, "fmt": fmt},
            "text": {"format": fmt},
        },
        "handlers": handlers,
        "root": {"handlers": list(handlers), "level": level},
        "loggers": {
            "commlink": {"level": level},
            "uvicorn.access": {"level": "WARNING"},
        },
    }


def setup_logging() -> None:
    """Apply the logging configuration described by the current settings."""
    from commlink.core.config import settings

    logging.config.dictConfig(build_logging_config(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_DIR))


def log_request(request: Request, response: Optional[Response] = None, error: Optional[Exception] = None) -> None:
    """
    Log one stage of an HTTP request.

    Called with only ``request`` when the request arrives, which assigns its id
    and start time, then again with the response or the exception.
    """
    logger = logging.getLogger("commlink.http")
    details: Dict[str, Any] = {"method": request.method, "path": request.url.path}

    if response is None and error is None:
        request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.started = time.perf_counter()
        _request_id.set(request.state.request_id)
        logger.debug("Request started", extra=details)
        return

    started = getattr(request.state, "started", None)
    if started is not None:
        details["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)

    if error is not None:
        details["status_code"] = getattr(error, "status_code", 500)
        logger.error(f"Request failed: {error}", extra=details)
    else:
        details["status_code"] = response.status_code
        logger.info("Request processed", extra=details)

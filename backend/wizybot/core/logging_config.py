"""
Logging setup for the Wizy chatbot service.

Production writes one JSON object per line; development writes colored,
human-readable lines. Every record emitted while a request is being served
carries that request's ID, so a chatbot answer can be followed through the
agent rounds, tool calls and provider requests it caused.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Optional

from wizybot.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else was passed through `extra=`
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "taskName", "request_id"}

_NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "httpx", "httpcore", "openai")


class RequestContextFilter(logging.Filter):
    """Stamp records with the ID of the request being served, or "-" outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def __init__(self, service_name: str = "wizybot"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            "environment": settings.ENVIRONMENT,
            "request_id": getattr(record, "request_id", "-"),
            "source": f"{record.filename}:{record.lineno}",
        }

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Console output for development."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        request_id = getattr(record, "request_id", "-")

        line = (
            f"{color}{timestamp} {record.levelname:<8} [{request_id}] "
            f"{record.name}: {record.getMessage()}{self.RESET}"
        )
        if record.exc_info and record.exc_info[0] is not None:
            last_line = traceback.format_exception(*record.exc_info)[-1].strip()
            line += f"\n{color}  {last_line}{self.RESET}"
        return line


def setup_logging(
    service_name: str = "wizybot",
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        service_name: Value of the `service` field in JSON logs
        log_level: Override log level (defaults to DEBUG when settings.DEBUG is on)
        json_logs: Override the format (defaults to JSON in production)
    """
    level = (log_level or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    use_json = json_logs if json_logs is not None else settings.ENVIRONMENT.lower() == "production"

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("wizybot.logging").info(
        f"Logging configured: level={level}, format={'JSON' if use_json else 'colored'}"
    )


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestLoggingMiddleware:
    """
    ASGI middleware that assigns a request ID, logs one line per request and
    returns the ID in the X-Request-ID response header.

    A valid incoming X-Request-ID is reused so IDs can be correlated with a
    caller's own logs.
    """

    SKIP_PATHS = ("/health",)

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger("wizybot.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = self._incoming_request_id(scope) or generate_request_id()
        token = request_id_var.set(request_id)
        scope.setdefault("state", {})["request_id"] = request_id

        started = datetime.utcnow()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER.lower().encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            path = scope.get("path", "/")
            if path not in self.SKIP_PATHS:
                duration_ms = (datetime.utcnow() - started).total_seconds() * 1000
                method = scope.get("method", "UNKNOWN")
                self.logger.log(
                    logging.WARNING if status_code >= 400 else logging.INFO,
                    f"{method} {path} {status_code} {duration_ms:.1f}ms",
                    extra={"method": method, "path": path, "status": status_code, "duration_ms": round(duration_ms, 1)},
                )
            request_id_var.reset(token)

    @staticmethod
    def _incoming_request_id(scope) -> Optional[str]:
        for name, value in scope.get("headers", []):
            if name.decode("latin-1").lower() == REQUEST_ID_HEADER.lower():
                candidate = value.decode("latin-1").strip()
                if candidate and len(candidate) <= 64 and candidate.replace("-", "").isalnum():
                    return candidate
        return None

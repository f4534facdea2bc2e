"""
Structured JSON logging for the stock services.

Every record is emitted as one JSON object carrying the service identity,
the request/correlation ids of the HTTP request being served, the source
location, and any ``extra_fields`` passed by the caller.
"""

import json
import logging
import logging.handlers
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)

_service_identity: Dict[str, str] = {
    "service": "unknown-service",
    "environment": "development",
    "version": "1.0.0",
}

REDACTED = "***REDACTED***"


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON documents"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "@timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_service_identity,
        }

        trace = _trace_context()
        if trace:
            log_obj["trace"] = trace

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_obj["custom"] = extra_fields

        duration_ms = getattr(record, 'duration_ms', None)
        if duration_ms is not None:
            log_obj["performance"] = {"duration_ms": duration_ms}

        return json.dumps(log_obj, default=str)


class SecurityFilter(logging.Filter):
    """Mask values of sensitive keys inside ``extra_fields``"""

    SENSITIVE_FIELDS = ('password', 'token', 'api_key', 'secret', 'authorization', 'cookie')

    def filter(self, record: logging.LogRecord) -> bool:
        extra_fields = getattr(record, 'extra_fields', None)
        if isinstance(extra_fields, dict):
            record.extra_fields = self._redact(extra_fields)
        return True

    def _redact(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        redacted = {}
        for key, value in fields.items():
            if any(s in str(key).lower() for s in self.SENSITIVE_FIELDS):
                redacted[key] = REDACTED
            elif isinstance(value, dict):
                redacted[key] = self._redact(value)
            else:
                redacted[key] = value
        return redacted


def _trace_context() -> Optional[Dict[str, str]]:
    context = {}
    request_id = request_id_var.get()
    if request_id:
        context["request_id"] = request_id
    correlation_id = correlation_id_var.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    return context or None


def setup_logging(
    service_name: str,
    level: str = "INFO",
    version: str = "1.0.0",
    environment: str = "development",
    log_file: Optional[str] = None,
) -> None:
    """
    Route the root logger through the structured formatter.

    Args:
        service_name: Name reported in every record
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        version: Service version reported in every record
        environment: Deployment environment reported in every record
        log_file: Optional path of an additional rotating log file
    """
    _service_identity.update(service=service_name, version=version, environment=environment)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5))

    formatter = StructuredFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(SecurityFilter())
        root_logger.addHandler(handler)

    logging.getLogger('uvicorn').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={'extra_fields': {'service': service_name, 'level': level, 'log_file': log_file}}
    )


def get_logger(name: str) -> logging.Logger:
    """Request ids are attached by the formatter from the current context"""
    return logging.getLogger(name)


def set_request_context(request_id: Optional[str] = None, correlation_id: Optional[str] = None) -> None:
    if request_id:
        request_id_var.set(request_id)
    if correlation_id:
        correlation_id_var.set(correlation_id)


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with its duration and echo its id back in ``X-Request-ID``.

    An incoming ``X-Request-ID`` header is reused so a caller can follow one
    transaction across services.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get('X-Request-ID') or generate_request_id()
        set_request_context(request_id=request_id, correlation_id=request.headers.get('X-Correlation-ID'))

        logger = get_logger(__name__)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                exc_info=True,
                extra={'extra_fields': {'method': request.method, 'path': request.url.path},
                       'duration_ms': (time.perf_counter() - start_time) * 1000}
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={'extra_fields': {'method': request.method, 'path': request.url.path,
                                    'status_code': response.status_code},
                   'duration_ms': (time.perf_counter() - start_time) * 1000}
        )
        response.headers['X-Request-ID'] = request_id
        return response

"""Structured JSON logging shared by the services."""

from __future__ import annotations

import logging
import sys
from typing import Optional
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


_SHOP_HEADER = "X-Tenant-ID"
_REQUEST_ID_HEADER = "X-Request-ID"
_TRACE_ID_HEADER = "X-Trace-ID"


def configure_logging(service_name: str, level: int = logging.INFO) -> structlog.stdlib.BoundLogger:
    """Route structlog through stdlib logging and render every event as one JSON line."""

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger().bind(service=service_name)


def _shop_from_path(path: str) -> Optional[str]:
    parts = [part for part in path.split("/") if part]
    if len(parts) >= 2 and parts[0] == "shops" and parts[1] != "status":
        return parts[1]
    return None


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Bind request id, trace id and shop slug to the log context of each request."""

    def __init__(self, app, *, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        super().__init__(app)
        self._logger = logger or structlog.get_logger()

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(_REQUEST_ID_HEADER) or str(uuid4())
        trace_id = request.headers.get(_TRACE_ID_HEADER) or request_id
        shop_slug = request.headers.get(_SHOP_HEADER) or _shop_from_path(request.url.path)

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            trace_id=trace_id,
            shop_slug=shop_slug,
            path=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
            self._logger.info("request_completed", status_code=response.status_code)
            response.headers[_REQUEST_ID_HEADER] = request_id
            return response
        except Exception:
            self._logger.exception("request_failed")
            raise
        finally:
            structlog.contextvars.clear_contextvars()

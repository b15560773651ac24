"""HTTP middleware: request correlation, access logging and response hardening."""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from checkout_explorer.observability.tracing import add_span_attribute, get_current_trace_id

logger = logging.getLogger(__name__)

RequestHandler = Callable[[Request], Awaitable[Response]]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access log line per request.

    Reuses the caller's ``X-Request-ID`` (or mints one), echoes it back with
    the processing time and trace ID, and logs upstream-facing failures
    (status >= 500) at WARNING so BigCommerce outages stand out.
    """

    async def dispatch(self, request: Request, call_next: RequestHandler) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        add_span_attribute("http.request_id", request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s raised",
                request.method,
                request.url.path,
                extra={"request_id": request_id, "duration_ms": _elapsed_ms(started)},
            )
            raise

        duration_ms = _elapsed_ms(started)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-Ms"] = str(duration_ms)
        trace_id = get_current_trace_id()
        if trace_id:
            response.headers["X-Trace-ID"] = trace_id

        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "client": request.client.host if request.client else None,
            },
        )
        return response


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers for every response."""

    async def dispatch(self, request: Request, call_next: RequestHandler) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        # Bodies carry access tokens and confirmation URLs carry checkout tokens
        response.headers["Cache-Control"] = "no-store"
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

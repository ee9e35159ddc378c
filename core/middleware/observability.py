"""
Observability middleware.

Gives every request a correlation id, logs one structured line when it
starts and one when it ends, and links both to the active OpenTelemetry
span.
"""

import logging
import time
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def current_trace_ids() -> Tuple[Optional[str], Optional[str]]:
    """Return (trace_id, span_id) of the active span, or Nones."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return None, None
    return format_trace_id(context.trace_id), format_span_id(context.span_id)


def outcome(status_code: int) -> str:
    """Bucket a status code for logs and the X-Request-Status header."""
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return "success"


class ObservabilityMiddleware:
    """
    Request logging with correlation ids.

    An incoming X-Correlation-ID header is reused so callers can follow a
    request across services; otherwise a new id is generated.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        trace_id, span_id = current_trace_ids()
        if trace_id:
            request.trace_id = trace_id  # type: ignore

        context = self._context(request, correlation_id, trace_id, span_id)
        logger.info(
            "Request started",
            extra={
                **context,
                "remote_addr": request.META.get("REMOTE_ADDR"),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
            },
        )

        start_time = time.time()
        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **context,
                    "request_status": "exception",
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        request_status = outcome(response.status_code)

        finished = {
            **context,
            "request_status": request_status,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
        }
        # set by the session middleware once the token resolves
        principal_id = getattr(request, "principal_id", None)
        if principal_id:
            finished["principal_id"] = str(principal_id)

        level = {"server_error": logging.ERROR, "client_error": logging.WARNING}.get(
            request_status, logging.INFO
        )
        logger.log(level, f"Request finished ({request_status})", extra=finished)

        response[CORRELATION_HEADER] = correlation_id
        response["X-Request-Status"] = request_status
        response["X-Request-Duration"] = f"{duration:.3f}"
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    @staticmethod
    def _context(
        request: HttpRequest,
        correlation_id: str,
        trace_id: Optional[str],
        span_id: Optional[str],
    ) -> Dict[str, Any]:
        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
        }
        if trace_id:
            context["trace_id"] = trace_id
            context["span_id"] = span_id
        return context

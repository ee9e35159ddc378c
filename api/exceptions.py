"""
API exception handlers.

This module maps domain exceptions to REST API error responses of the
form ``{"error": {"code": ..., "message": ...}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    AccessDeniedError,
    AlreadyRevokedError,
    DomainException,
    GrantFailedError,
    GroupInUseError,
    GroupNameTakenError,
    InvalidArgumentError,
    InvalidCredentialsError,
    KeyAlreadyConsumedError,
    KeyRevokedError,
    NotFoundError,
    StorageFailureError,
    UsernameTakenError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (
        (
            KeyAlreadyConsumedError,
            KeyRevokedError,
            AlreadyRevokedError,
            GroupInUseError,
            GroupNameTakenError,
            UsernameTakenError,
        ),
        status.HTTP_409_CONFLICT,
    ),
    (GrantFailedError, status.HTTP_502_BAD_GATEWAY),
    (StorageFailureError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, context, trace_id)
    elif isinstance(exc, ValidationError):
        response = exception_handler(exc, context)
        response.data = {
            "error": {
                "code": "INVALID_ARGUMENT",
                "message": "Request validation failed",
                "details": exc.detail,
            }
        }
    elif isinstance(exc, PermissionDenied):
        response = exception_handler(exc, context)
        response.data = {"error": {"code": "ACCESS_DENIED", "message": str(exc.detail)}}
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_")
        response.data = {"error": {"code": code, "message": str(exc.detail)}}
    elif isinstance(exc, Http404):
        response = Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        response = _handle_unexpected_exception(exc, context, trace_id)

    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def domain_status_code(exc: DomainException) -> int:
    """HTTP status for a domain exception."""
    for exc_types, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_types):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def _handle_domain_exception(
    exc: DomainException, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle domain-specific exceptions."""
    status_code = domain_status_code(exc)
    request = context.get("request")
    errors_total.labels(
        error_type=exc.code.lower(), endpoint=request.path if request else ""
    ).inc()

    if status_code >= 500:
        logger.error(f"Domain exception: {exc.code} - {exc.message}", extra={"trace_id": trace_id})
    else:
        logger.warning(
            f"Domain exception: {exc.code} - {exc.message}", extra={"trace_id": trace_id}
        )

    body = {"error": {"code": exc.code, "message": exc.message}}
    if isinstance(exc, GrantFailedError):
        body["error"]["key_id"] = exc.key_id
    return Response(body, status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error(f"Unexpected error: {exc}", extra={"trace_id": trace_id}, exc_info=True)
    request = context.get("request")
    errors_total.labels(error_type="internal_error", endpoint=request.path if request else "").inc()
    return Response(
        {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

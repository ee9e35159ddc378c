"""
Session authentication middleware.

Resolves the ``Authorization: Bearer <token>`` header of API requests to
the acting principal.
"""

import logging
from typing import Optional

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.deprecation import MiddlewareMixin

from accounts.infrastructure.models import Session

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"

# Reachable without a session
PUBLIC_PATHS = frozenset({"/api/v1/auth/register", "/api/v1/auth/login"})


def bearer_token(request: HttpRequest) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def _unauthorized(message: str) -> JsonResponse:
    return JsonResponse({"error": {"code": "UNAUTHORIZED", "message": message}}, status=401)


class SessionAuthenticationMiddleware(MiddlewareMixin):
    """
    Middleware for session token authentication.

    This middleware:
    1. Requires a bearer session token on /api/v1/ paths except sign-up and login
    2. Sets ``request.principal_id`` and ``request.principal``
    3. Returns 401 Unauthorized if the token is missing or unknown
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and resolve the session.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        request.principal_id = None  # type: ignore
        request.principal = None  # type: ignore

        if not request.path.startswith(API_PREFIX) or request.path in PUBLIC_PATHS:
            return None

        token = bearer_token(request)
        if not token:
            return _unauthorized("Missing session token. Provide Authorization: Bearer <token>.")

        # pylint: disable=no-member
        session = (
            Session.objects.select_related("principal")
            .filter(token_hash=Session.hash_token(token))
            .first()
        )
        if session is None:
            logger.warning(f"Invalid session token attempted: {token[:8]}...")
            return _unauthorized("Invalid session token")

        Session.objects.filter(id=session.id).update(last_used_at=timezone.now())
        request.principal_id = session.principal_id  # type: ignore
        request.principal = session.principal  # type: ignore
        return None

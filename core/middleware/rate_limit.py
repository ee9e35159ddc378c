"""
Rate limiting middleware.

Limits activation key redemption attempts per session token, so secrets
cannot be guessed by brute force.
"""

import hashlib
import time
from typing import Callable, Tuple

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse, JsonResponse

from core.metrics import errors_total, redemption_failures_total
from core.middleware.auth import bearer_token

REDEEM_PATH = "/api/v1/account/redeem"


class RedemptionRateLimitMiddleware:
    """
    Fixed-window rate limit on redemption attempts.

    Counters live in the Django cache, keyed by a hash of the session
    token. Default limit: 10 attempts per minute.
    """

    DEFAULT_RATE_LIMIT = 10  # attempts per window
    RATE_LIMIT_WINDOW = 60  # seconds

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    @property
    def limit(self) -> int:
        return getattr(settings, "REDEEM_RATE_LIMIT", self.DEFAULT_RATE_LIMIT)

    def _get_rate_limit_key(self, token: str) -> str:
        """
        Generate cache key for rate limiting.

        Args:
            token: Session token

        Returns:
            Cache key string
        """
        token_hash = hashlib.sha256(token.encode()).hexdigest()[:16]
        return f"redeem_rate_limit:{token_hash}"

    def _check_rate_limit(self, token: str) -> Tuple[bool, int, int]:
        """
        Count one attempt and check it against the limit.

        Args:
            token: Session token

        Returns:
            Tuple of (is_allowed, remaining, reset_time)
        """
        window_start = int(time.time() / self.RATE_LIMIT_WINDOW)
        reset_time = (window_start + 1) * self.RATE_LIMIT_WINDOW
        full_key = f"{self._get_rate_limit_key(token)}:{window_start}"

        if cache.add(full_key, 1, timeout=self.RATE_LIMIT_WINDOW):
            new_count = 1
        else:
            new_count = cache.incr(full_key, 1)

        if new_count > self.limit:
            return False, 0, reset_time
        return True, max(0, self.limit - new_count), reset_time

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request with rate limiting.

        Args:
            request: HTTP request

        Returns:
            HTTP response with rate limit headers
        """
        if request.method != "POST" or request.path.rstrip("/") != REDEEM_PATH:
            return self.get_response(request)

        token = bearer_token(request)
        if not token:
            # No token, let auth middleware handle it
            return self.get_response(request)

        is_allowed, remaining, reset_time = self._check_rate_limit(token)

        if not is_allowed:
            errors_total.labels(error_type="rate_limit_exceeded", endpoint=request.path).inc()
            redemption_failures_total.labels(reason="rate_limited").inc()
            response = JsonResponse(
                {
                    "error": {
                        "code": "RATE_LIMIT_EXCEEDED",
                        "message": "Too many redemption attempts. Please try again later.",
                    }
                },
                status=429,
            )
        else:
            response = self.get_response(request)

        # Add rate limit headers (RFC 6585)
        response["X-RateLimit-Limit"] = str(self.limit)
        response["X-RateLimit-Remaining"] = str(remaining)
        response["X-RateLimit-Reset"] = str(reset_time)
        if not is_allowed:
            response["Retry-After"] = str(max(0, reset_time - int(time.time())))

        return response

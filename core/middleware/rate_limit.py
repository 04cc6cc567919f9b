"""
Rate limiting middleware.

Fixed-window request counting in the Django cache, keyed by caller
identity. Knows nothing about licenses or tokens.
"""

import hashlib
import time
from typing import Callable, Dict, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse, JsonResponse

from core.domain.exceptions import RateLimitExceededError
from core.metrics import errors_total, rate_limit_rejections_total


class RateLimiter:
    """
    Fixed-window counter.

    Counts live in the shared cache, so limits hold across workers.
    """

    def __init__(self, limit: int, window: int = 60, prefix: str = "rate_limit"):
        """
        Initialize limiter.

        Args:
            limit: Requests allowed per window
            window: Window length in seconds
            prefix: Cache key namespace
        """
        self.limit = limit
        self.window = window
        self.prefix = prefix

    def _get_rate_limit_key(self, identity: str, window_start: int) -> str:
        # Hash identity for cache key (don't store raw IPs or keys)
        key_hash = hashlib.sha256(identity.encode()).hexdigest()[:16]
        return f"{self.prefix}:{key_hash}:{window_start}"

    def hit(self, identity: str, now: Optional[float] = None) -> Tuple[bool, int, int]:
        """
        Count one request for ``identity``.

        Args:
            identity: Caller identity (client IP, API key)
            now: Current UNIX time (defaults to time.time())

        Returns:
            Tuple of (is_allowed, remaining, reset_time)
        """
        now = time.time() if now is None else now
        window_start = int(now / self.window)
        reset_time = (window_start + 1) * self.window
        full_key = self._get_rate_limit_key(identity, window_start)

        if cache.add(full_key, 1, timeout=self.window):
            new_count = 1
        else:
            try:
                new_count = cache.incr(full_key, 1)
            except ValueError:
                # Key expired between add and incr
                cache.set(full_key, 1, timeout=self.window)
                new_count = 1

        if new_count > self.limit:
            return False, 0, reset_time
        return True, self.limit - new_count, reset_time

    def check(self, identity: str, now: Optional[float] = None) -> int:
        """
        Count one request and raise if it is over the limit.

        For entry points that are not HTTP views (tasks, commands).

        Returns:
            Requests remaining in the current window

        Raises:
            RateLimitExceededError: If the limit is exceeded
        """
        now = time.time() if now is None else now
        is_allowed, remaining, reset_time = self.hit(identity, now)
        if not is_allowed:
            raise RateLimitExceededError(retry_after=max(0, reset_time - int(now)))
        return remaining


class RateLimitMiddleware:
    """
    Rate limiting middleware per client IP.

    Limits come from ``settings.RATE_LIMITS``: a mapping of path prefix
    to ``(limit, window_seconds)``. Paths matching no prefix pass
    through untouched.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response
        configured: Dict[str, Tuple[int, int]] = getattr(settings, "RATE_LIMITS", {})
        # Longest prefix first
        self.limiters = [
            (prefix, RateLimiter(limit, window, prefix=f"rate_limit:{prefix}"))
            for prefix, (limit, window) in sorted(
                configured.items(), key=lambda item: len(item[0]), reverse=True
            )
        ]

    @staticmethod
    def _get_client_ip(request: HttpRequest) -> str:
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR", "unknown")

    def _limiter_for(self, path: str) -> Tuple[Optional[str], Optional[RateLimiter]]:
        for prefix, limiter in self.limiters:
            if path.startswith(prefix):
                return prefix, limiter
        return None, None

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request with rate limiting.

        Args:
            request: HTTP request

        Returns:
            HTTP response with rate limit headers
        """
        prefix, limiter = self._limiter_for(request.path)
        if limiter is None:
            return self.get_response(request)

        is_allowed, remaining, reset_time = limiter.hit(self._get_client_ip(request))

        if not is_allowed:
            rate_limit_rejections_total.labels(path_prefix=prefix).inc()
            errors_total.labels(error_type="rate_limit_exceeded", endpoint=request.path).inc()

            response = JsonResponse(
                {
                    "error": {
                        "code": "RATE_LIMIT_EXCEEDED",
                        "message": "Too many requests. Please try again later.",
                    }
                },
                status=429,
            )
            response["Retry-After"] = str(max(0, reset_time - int(time.time())))
        else:
            response = self.get_response(request)

        # Add rate limit headers (RFC 6585)
        response["X-RateLimit-Limit"] = str(limiter.limit)
        response["X-RateLimit-Remaining"] = str(remaining)
        response["X-RateLimit-Reset"] = str(reset_time)

        return response

from django.utils.deprecation import MiddlewareMixin
import logging
import time

logger = logging.getLogger(__name__)


def _describe_user(request):
    """Return a short label for the caller, safe for anonymous requests."""
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return "anonymous"
    return f"{user.pk}:{getattr(user, 'role', '-')}"


class RequestLoggingMiddleware(MiddlewareMixin):
    """Log one line per API request with status and timing.

    Mutations and failed requests are logged at INFO, plain reads at DEBUG.
    The user label is resolved after the view ran so JWT-authenticated
    callers (authenticated by DRF, not by the session middleware) show up.
    """

    def process_request(self, request):
        request._tasktrack_started = time.monotonic()

    def process_response(self, request, response):
        started = getattr(request, "_tasktrack_started", None)
        if started is None:
            return response

        elapsed_ms = (time.monotonic() - started) * 1000
        level = logging.DEBUG
        if request.method not in ("GET", "HEAD", "OPTIONS") or response.status_code >= 400:
            level = logging.INFO

        logger.log(
            level,
            "%s %s -> %s (%.1fms) user=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            _describe_user(request),
        )
        return response

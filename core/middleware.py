import logging
import time

logger = logging.getLogger('core.request')


class RequestLoggingMiddleware:
    """Log method, path, status and duration of every API request."""
    SKIP_PREFIXES = ('/static/', '/metrics', '/healthz')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if any(path.startswith(p) for p in self.SKIP_PREFIXES):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, '%s %s %s %.1fms', request.method, path, response.status_code, elapsed_ms)
        return response

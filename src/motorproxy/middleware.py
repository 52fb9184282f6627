"""
Access logging for proxied traffic.
"""

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from motorproxy.logger import get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Write one access line per request and set ``X-Response-Time``.

    Paths in ``quiet_paths`` (health polling) are logged at DEBUG, upstream
    5xx relays at WARNING, everything else at INFO.
    """

    def __init__(self, app, quiet_paths: tuple = ("/health",)):
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths)

    def _level(self, path: str, status_code: int) -> str:
        if status_code >= 500:
            return "WARNING"
        return "DEBUG" if path in self.quiet_paths else "INFO"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        client = request.client.host if request.client else "unknown"
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"{client} {request.method} {request.url.path} failed: {e}")
            raise

        elapsed = f"{(time.perf_counter() - started) * 1000:.2f}ms"
        logger.log(
            self._level(request.url.path, response.status_code),
            f"{client} {request.method} {request.url.path} -> {response.status_code} in {elapsed}",
        )
        response.headers["X-Response-Time"] = elapsed
        return response

"""Access logging for the redirection routes."""

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request once its response is known.

    Server errors are logged at error level and refused writes at warning
    level, so a quiet log level still shows what went wrong.
    """

    def __init__(self, app, logger: logging.Logger = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("goto_links.web")

    @staticmethod
    def level_for(status_code: int) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400:
            return logging.WARNING
        return logging.INFO

    async def dispatch(self, request: Request, call_next: Callable):
        started = time.perf_counter()
        client = request.client.host if request.client else "-"
        line = f"{client} {request.method} {request.url.path}"

        try:
            response = await call_next(request)
        except Exception:
            self.logger.exception(f"{line} raised after {(time.perf_counter() - started) * 1000:.1f}ms")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        location = response.headers.get("location")
        if location:
            line += f" -> {location}"

        self.logger.log(
            self.level_for(response.status_code),
            f"{line} {response.status_code} {elapsed_ms:.1f}ms",
        )
        return response

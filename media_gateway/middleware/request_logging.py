import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


logger = logging.getLogger("media_gateway.middleware.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and time-to-headers for every request.

    Response bodies are never read here; media responses are streamed through
    untouched.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                "Failed %s %s after %.2fms", request.method, request.url.path, elapsed_ms
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s url=%s range=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            request.query_params.get("url"),
            request.headers.get("range"),
            response.status_code,
            elapsed_ms,
        )
        return response

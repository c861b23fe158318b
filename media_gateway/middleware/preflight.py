from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from media_gateway.core.cors import cors_headers


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request with 204 and the CORS policy, before routing."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=cors_headers())
        return await call_next(request)

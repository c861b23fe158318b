import logging

# FastAPI imports
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# API imports
from media_gateway import __version__
from media_gateway.api import api_router

# Core imports
from media_gateway.core.config import settings
from media_gateway.core.cors import cors_headers
from media_gateway.core.lifespan import lifespan

# Middleware imports
from media_gateway.middleware import PreflightMiddleware, RequestLoggingMiddleware
from media_gateway.modules.gateway.errors import GatewayError

# Logging configuration
logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = GatewayError.message


async def gateway_error_handler(request: Request, exc: GatewayError) -> PlainTextResponse:
    if exc.status_code >= 500:
        cause = exc.__cause__ or exc
        logger.error(
            "Request failed url=%s error=%s: %s",
            request.query_params.get("url"),
            type(exc).__name__,
            cause,
        )
    else:
        logger.warning("Rejected request url=%s: %s", request.query_params.get("url"), exc)
    return PlainTextResponse(exc.message, status_code=exc.status_code, headers=cors_headers())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers=cors_headers(getattr(exc, "headers", None)),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
        headers=cors_headers(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    logger.exception("Unhandled exception %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse(GENERIC_ERROR_MESSAGE, status_code=500, headers=cors_headers())


def create_application() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        description="Resolves Douyin share links and relays their media with range support",
        version=__version__,
        debug=settings.DEBUG,
        lifespan=lifespan
    )

    # Added last runs first: requests are logged, then preflight is answered.
    application.add_middleware(PreflightMiddleware)
    application.add_middleware(RequestLoggingMiddleware)

    application.add_exception_handler(GatewayError, gateway_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)

    application.include_router(api_router)

    return application

app = create_application()

@app.get("/health", tags=["App"], summary="Health check")
async def health_check():
    return JSONResponse({"status": "healthy"}, headers=cors_headers())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("media_gateway.main:app", host=settings.HOST, port=settings.PORT)

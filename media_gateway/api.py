from fastapi import APIRouter

# Import module routers
from media_gateway.modules.gateway.routes import router as gateway_router

# Create main API router
api_router = APIRouter()

# The gateway owns the site root: GET /?url=... and OPTIONS on any path
api_router.include_router(gateway_router, tags=["gateway"])

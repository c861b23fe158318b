import logging
from contextlib import asynccontextmanager

import aiohttp
from fastapi import FastAPI

from media_gateway.core.config import settings

# Configure logger
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🔌 Opening upstream HTTP session...")
    app.state.http_session = aiohttp.ClientSession()

    yield

    # Shutdown
    logger.info("🛑 Closing upstream HTTP session...")
    await app.state.http_session.close()
    app.state.http_session = None

import logging

from fastapi import APIRouter, Depends, Request, Response

from media_gateway.core.dependencies import get_media_fetcher, get_resolver
from media_gateway.modules.resolver.base import MediaResolver

from .fetcher import MediaFetcher
from .service import classify_request, handle_media_request

router = APIRouter()
logger = logging.getLogger(__name__)


# OPTIONS never reaches this router; PreflightMiddleware answers it.
@router.get("/", summary="Relay the media behind a share URL, or its metadata with ?data")
async def relay(
    request: Request,
    resolver: MediaResolver = Depends(get_resolver),
    fetcher: MediaFetcher = Depends(get_media_fetcher),
) -> Response:
    media_request = classify_request(request)
    logger.info(
        "Gateway request url=%s metadata_only=%s range=%s",
        media_request.input_url,
        media_request.wants_metadata_only,
        media_request.caller_range,
    )
    return await handle_media_request(media_request, resolver, fetcher)

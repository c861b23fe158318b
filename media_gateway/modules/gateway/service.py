import logging
from typing import AsyncIterator, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from media_gateway.core.config import settings
from media_gateway.core.cors import cors_headers
from media_gateway.modules.resolver.base import MediaResolver

from .errors import (
    ClientInputError,
    ResolutionError,
    UnsupportedContentError,
    UpstreamFetchError,
)
from .fetcher import MediaFetcher
from .schemas import ContentType, MediaRequest, ResolvedMedia, UpstreamMediaResponse

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "video/mp4"


def classify_request(request: Request) -> MediaRequest:
    """Build a :class:`MediaRequest` from the query string and headers."""
    input_url = (request.query_params.get("url") or "").strip()
    if not input_url:
        raise ClientInputError()

    return MediaRequest(
        input_url=input_url,
        wants_metadata_only="data" in request.query_params,
        caller_range=request.headers.get("range"),
    )


async def resolve(resolver: MediaResolver, input_url: str) -> ResolvedMedia:
    """Call the resolver once; every failure becomes a ResolutionError."""
    try:
        return await resolver.resolve_metadata(input_url)
    except ResolutionError:
        raise
    except Exception as exc:
        raise ResolutionError(f"Resolver failed for {input_url!r}: {exc}") from exc


def upstream_request_headers(caller_range: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Referer": settings.UPSTREAM_REFERER,
        "User-Agent": settings.UPSTREAM_USER_AGENT,
        # Compressed transfer would make Content-Length and Content-Range describe
        # different bytes than the ones relayed.
        "Accept-Encoding": "identity",
    }
    if caller_range:
        headers["Range"] = caller_range
    return headers


def build_media_headers(upstream: UpstreamMediaResponse) -> Dict[str, str]:
    headers = {"Accept-Ranges": "bytes"}
    # Deliberately not defaulted to "0" when upstream omits it: a zero length in
    # front of a non-empty body breaks HTTP framing, so the body goes out chunked.
    content_length = upstream.headers.get("content-length")
    if content_length:
        headers["Content-Length"] = content_length
    content_range = upstream.headers.get("content-range")
    if content_range:
        headers["Content-Range"] = content_range
    # Bytes are relayed undecoded, so a coding the CDN applied anyway must be declared.
    content_encoding = upstream.headers.get("content-encoding")
    if content_encoding and content_encoding != "identity":
        headers["Content-Encoding"] = content_encoding
    return cors_headers(headers)


async def relay_body(upstream: UpstreamMediaResponse) -> AsyncIterator[bytes]:
    """Yield the upstream body chunk by chunk.

    The next upstream read only happens once the previous chunk has been taken
    by the response writer, so a slow caller slows the upstream read. The
    upstream response is closed however the iteration ends, including when the
    caller disconnects and the streaming task is cancelled.
    """
    relayed = 0
    completed = False
    try:
        async for chunk in upstream.body:
            relayed += len(chunk)
            yield chunk
        completed = True
    finally:
        await upstream.close()
        if completed:
            logger.debug("Relay completed after %d bytes", relayed)
        else:
            logger.info("Relay interrupted after %d bytes; upstream closed", relayed)


def metadata_response(resolved: ResolvedMedia) -> Response:
    return JSONResponse(
        content=resolved.raw_metadata,
        headers=cors_headers(),
        media_type="application/json; charset=utf-8",
    )


async def stream_video(
    resolved: ResolvedMedia,
    media_request: MediaRequest,
    fetcher: MediaFetcher,
) -> Response:
    headers = upstream_request_headers(media_request.caller_range)
    try:
        upstream = await fetcher.open(resolved.video_url, headers)
    except UpstreamFetchError:
        raise
    except Exception as exc:
        raise UpstreamFetchError(f"Could not open media upstream: {exc}") from exc

    if not upstream.ok or upstream.body is None:
        await upstream.close()
        raise UpstreamFetchError(f"Media upstream answered {upstream.status}")

    logger.info(
        "Relaying media status=%s range=%s content_range=%s",
        upstream.status,
        media_request.caller_range,
        upstream.headers.get("content-range"),
    )
    return StreamingResponse(
        relay_body(upstream),
        status_code=upstream.status,
        headers=build_media_headers(upstream),
        media_type=upstream.headers.get("content-type") or DEFAULT_MEDIA_TYPE,
    )


async def handle_media_request(
    media_request: MediaRequest,
    resolver: MediaResolver,
    fetcher: MediaFetcher,
) -> Response:
    """Resolve the share URL and serve either its metadata or its media."""
    resolved = await resolve(resolver, media_request.input_url)

    if media_request.wants_metadata_only:
        return metadata_response(resolved)

    if resolved.content_type is ContentType.VIDEO:
        return await stream_video(resolved, media_request, fetcher)
    if resolved.content_type is ContentType.IMAGE_GALLERY:
        raise UnsupportedContentError()
    if resolved.content_type is ContentType.UNKNOWN:
        raise ResolutionError("Unknown or unsupported content type")
    raise ResolutionError(f"Unhandled content type {resolved.content_type!r}")

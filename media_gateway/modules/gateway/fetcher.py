"""aiohttp-backed opener for direct media URLs."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Mapping, Optional, Protocol

import aiohttp

from media_gateway.core.config import settings

from .errors import UpstreamFetchError
from .schemas import UpstreamMediaResponse

logger = logging.getLogger(__name__)


class MediaFetcher(Protocol):
    """Opens the direct media URL without reading its body."""

    async def open(self, url: str, headers: Mapping[str, str]) -> UpstreamMediaResponse:
        ...


class AiohttpMediaFetcher:
    """Opens a streaming GET against the media CDN on a shared session."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        chunk_size: Optional[int] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ) -> None:
        self._session = session
        self._chunk_size = chunk_size or settings.STREAM_CHUNK_SIZE
        # No total cap: a long video may legitimately stream for minutes.
        self._timeout = timeout or aiohttp.ClientTimeout(
            total=None,
            connect=settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS,
            sock_read=settings.UPSTREAM_READ_TIMEOUT_SECONDS,
        )

    async def open(self, url: str, headers: Mapping[str, str]) -> UpstreamMediaResponse:
        request_headers = dict(headers)
        request_headers.setdefault("Accept-Encoding", "identity")
        try:
            # Relayed bytes must be exactly the ones Content-Length and Content-Range describe.
            response = await self._session.get(
                url,
                headers=request_headers,
                timeout=self._timeout,
                allow_redirects=True,
                auto_decompress=False,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamFetchError(f"Could not connect to media upstream: {exc}") from exc

        async def _close() -> None:
            response.close()

        return UpstreamMediaResponse(
            status=response.status,
            headers=response.headers,
            body=self._iter_body(response),
            _close=_close,
        )

    async def _iter_body(self, response: aiohttp.ClientResponse) -> AsyncIterator[bytes]:
        async for chunk in response.content.iter_chunked(self._chunk_size):
            yield chunk

"""Reusable dependency providers for FastAPI routes."""

import aiohttp
from fastapi import Depends, Request

from media_gateway.modules.gateway.fetcher import AiohttpMediaFetcher, MediaFetcher
from media_gateway.modules.resolver.base import MediaResolver
from media_gateway.modules.resolver.douyin import DouyinResolver


def get_http_session(request: Request) -> aiohttp.ClientSession:
    """Return the upstream session opened by the application lifespan."""
    session = getattr(request.app.state, "http_session", None)
    if session is None:
        raise RuntimeError("HTTP session is not initialised; is the lifespan running?")
    return session


def get_resolver(session: aiohttp.ClientSession = Depends(get_http_session)) -> MediaResolver:
    return DouyinResolver(session)


def get_media_fetcher(session: aiohttp.ClientSession = Depends(get_http_session)) -> MediaFetcher:
    return AiohttpMediaFetcher(session)

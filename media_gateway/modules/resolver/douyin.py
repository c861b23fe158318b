"""Resolver for Douyin share links.

A share link (``https://v.douyin.com/xxxx/``, usually pasted together with some
prose) redirects to the canonical post page. The post id taken from that page
is used to load the mobile share page, which embeds the post record as JSON in
``window._ROUTER_DATA``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from media_gateway.core.config import settings
from media_gateway.modules.gateway.errors import ResolutionError
from media_gateway.modules.gateway.schemas import ResolvedMedia

from .schemas import VideoInfo

logger = logging.getLogger(__name__)

SHARE_PAGE_URL = "https://www.iesdouyin.com/share/video/{aweme_id}/"

_URL_PATTERN = re.compile(r"https?://[^\s　，。]+")
_POST_ID_PATTERNS = (
    re.compile(r"/(?:video|note|slides)/(\d+)"),
    re.compile(r"[?&](?:modal_id|aweme_id)=(\d+)"),
)
_ROUTER_DATA_PATTERN = re.compile(
    r"window\._ROUTER_DATA\s*=\s*(\{.*?\})\s*</script>", re.DOTALL
)


def extract_share_url(text: str) -> str:
    """Return the first http(s) URL found in ``text``."""
    match = _URL_PATTERN.search(text or "")
    if not match:
        raise ResolutionError(f"No URL found in input: {text!r}")
    return match.group(0)


def extract_post_id(url: str) -> Optional[str]:
    for pattern in _POST_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def parse_router_data(html: str) -> Dict[str, Any]:
    match = _ROUTER_DATA_PATTERN.search(html or "")
    if not match:
        raise ResolutionError("Share page does not embed _ROUTER_DATA")
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        raise ResolutionError(f"Malformed _ROUTER_DATA payload: {exc}") from exc


def find_post_item(router_data: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the first post item from the page loader data."""
    loader_data = router_data.get("loaderData") or {}
    for key, page in loader_data.items():
        if not key.endswith("/page") or not isinstance(page, dict):
            continue
        items = ((page.get("videoInfoRes") or {}).get("item_list")) or []
        if items:
            return items[0]
    raise ResolutionError("Post not found; it may have been deleted or made private")


def _first_url(url_list: Optional[List[str]]) -> Optional[str]:
    for url in url_list or []:
        if url:
            return url
    return None


def build_video_info(item: Dict[str, Any]) -> VideoInfo:
    author = item.get("author") or {}
    statistics = item.get("statistics") or {}
    images = item.get("images") or []

    image_urls = [url for url in (_first_url(image.get("url_list")) for image in images) if url]
    video_url: Optional[str] = None
    if not image_urls:
        play_addr = (item.get("video") or {}).get("play_addr") or {}
        play_url = _first_url(play_addr.get("url_list"))
        if play_url:
            # "playwm" serves the watermarked rendition.
            video_url = play_url.replace("playwm", "play")

    return VideoInfo(
        aweme_id=str(item.get("aweme_id") or ""),
        desc=item.get("desc") or "",
        create_time=item.get("create_time"),
        nickname=author.get("nickname") or "",
        signature=author.get("signature") or "",
        digg_count=statistics.get("digg_count") or 0,
        comment_count=statistics.get("comment_count") or 0,
        share_count=statistics.get("share_count") or 0,
        collect_count=statistics.get("collect_count") or 0,
        type="img" if image_urls else "video",
        video_url=video_url,
        image_url_list=image_urls,
    )


class DouyinResolver:
    """Resolves Douyin share links using a caller-owned aiohttp session."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._session = session
        self._headers = {"User-Agent": user_agent or settings.RESOLVER_USER_AGENT}
        self._timeout = aiohttp.ClientTimeout(total=timeout or settings.RESOLVER_TIMEOUT_SECONDS)

    async def resolve_metadata(self, input_url: str) -> ResolvedMedia:
        info = await self.get_video_info(input_url)
        return ResolvedMedia.from_metadata(info.to_metadata())

    async def get_video_info(self, input_url: str) -> VideoInfo:
        try:
            aweme_id = await self._resolve_post_id(input_url)
            _, html = await self._fetch_text(SHARE_PAGE_URL.format(aweme_id=aweme_id))
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ResolutionError(f"Douyin request failed for {input_url!r}: {exc}") from exc

        item = find_post_item(parse_router_data(html))
        info = build_video_info(item)
        logger.info("Resolved aweme_id=%s type=%s", info.aweme_id, info.type)
        return info

    async def _resolve_post_id(self, input_url: str) -> str:
        text = (input_url or "").strip()
        if text.isdigit():
            return text

        share_url = extract_share_url(text)
        aweme_id = extract_post_id(share_url)
        if aweme_id:
            return aweme_id

        final_url, _ = await self._fetch_text(share_url)
        aweme_id = extract_post_id(final_url)
        if not aweme_id:
            raise ResolutionError(f"Could not find a post id in {final_url!r}")
        return aweme_id

    async def _fetch_text(self, url: str) -> Tuple[str, str]:
        async with self._session.get(
            url,
            headers=self._headers,
            timeout=self._timeout,
            allow_redirects=True,
        ) as response:
            if response.status >= 400:
                raise ResolutionError(f"Douyin responded {response.status} for {url}")
            return str(response.url), await response.text()

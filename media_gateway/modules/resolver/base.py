"""Contract between the gateway and a share-link resolver."""

from __future__ import annotations

from typing import Protocol

from media_gateway.modules.gateway.schemas import ResolvedMedia


class MediaResolver(Protocol):
    """Turns a share URL into a :class:`ResolvedMedia`.

    Implementations raise ``ResolutionError`` when the link cannot be parsed,
    the platform rejects the request, or the post no longer exists.
    """

    async def resolve_metadata(self, input_url: str) -> ResolvedMedia:
        ...

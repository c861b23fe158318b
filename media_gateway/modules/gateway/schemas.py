"""Value types passed through one gateway request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional


class ContentType(str, Enum):
    VIDEO = "video"
    IMAGE_GALLERY = "img"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "ContentType":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class MediaRequest:
    """What the caller asked for, derived once from the inbound request."""

    input_url: str
    wants_metadata_only: bool = False
    caller_range: Optional[str] = None


@dataclass(frozen=True)
class ResolvedMedia:
    """Resolver output. A ``VIDEO`` always carries a non-empty ``video_url``."""

    content_type: ContentType
    video_url: Optional[str] = None
    raw_metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.content_type is ContentType.VIDEO and not self.video_url:
            raise ValueError("ResolvedMedia of type video requires a video_url")

    @classmethod
    def from_metadata(cls, metadata: Dict[str, Any]) -> "ResolvedMedia":
        """Classify a metadata record.

        A record typed ``video`` without a usable ``video_url`` is classified as
        ``UNKNOWN`` instead of guessing at intent.
        """
        content_type = ContentType.parse(metadata.get("type"))
        video_url = metadata.get("video_url") or None
        if content_type is ContentType.VIDEO and not video_url:
            content_type = ContentType.UNKNOWN
        return cls(
            content_type=content_type,
            video_url=video_url if content_type is ContentType.VIDEO else None,
            raw_metadata=metadata,
        )


@dataclass
class UpstreamMediaResponse:
    """Open response from the direct media URL.

    ``body`` yields chunks as they arrive; ``close`` releases the connection and
    is safe to call more than once. Header names are stored lower-cased.
    """

    status: int
    headers: Mapping[str, str]
    body: Optional[AsyncIterator[bytes]]
    _close: Optional[Callable[[], Awaitable[None]]] = None
    closed: bool = False

    def __post_init__(self) -> None:
        self.headers = {name.lower(): value for name, value in self.headers.items()}

    @property
    def ok(self) -> bool:
        return self.status in (200, 206)

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._close is not None:
            await self._close()

"""Share-link resolvers producing :class:`ResolvedMedia` records."""

from .base import MediaResolver
from .douyin import DouyinResolver

__all__ = ["DouyinResolver", "MediaResolver"]

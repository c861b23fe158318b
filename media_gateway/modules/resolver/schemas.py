from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class VideoInfo(BaseModel):
    """Normalized metadata record for one Douyin post."""
    model_config = ConfigDict(frozen=True)

    aweme_id: str
    desc: str = ""
    create_time: Optional[int] = None
    nickname: str = ""
    signature: str = ""
    digg_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    collect_count: int = 0
    type: Literal["video", "img"] = "video"
    video_url: Optional[str] = None
    image_url_list: List[str] = Field(default_factory=list)

    def to_metadata(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

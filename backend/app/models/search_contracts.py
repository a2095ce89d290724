from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backend.app.services.record_extractor import VideoResult


class SearchRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str | None = None
    # Fractional counts are accepted and rounded up once clamped.
    max: float | None = Field(default=None, allow_inf_nan=False)


class VideoResultModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str
    url: str
    title: str
    description: str
    duration: str
    views: str
    published_at: str = Field(alias="publishedAt")
    channel_title: str = Field(alias="channelTitle")
    thumbnail: str

    @classmethod
    def from_result(cls, video: VideoResult) -> VideoResultModel:
        return cls(
            id=video.id,
            url=video.url,
            title=video.title,
            description=video.description,
            duration=video.duration,
            views=video.views,
            published_at=video.published_at,
            channel_title=video.channel_title,
            thumbnail=video.thumbnail,
        )


def _default_items() -> list[VideoResultModel]:
    return []


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query: str
    items: list[VideoResultModel] = Field(default_factory=_default_items)
    generated_at: datetime = Field(alias="generatedAt")


class SearchErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    error: str

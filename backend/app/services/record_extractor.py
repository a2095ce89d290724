from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from backend.app.services.text_normalizer import clean_text, format_count, format_runtime

WATCH_URL_BASE = "https://www.youtube.com/watch?v="
THUMBNAIL_FALLBACK_TEMPLATE = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
RECENT_PUBLISHED_LABEL = "· recente"

LOGGER = logging.getLogger("clipfinder.search")


@dataclass(frozen=True)
class VideoResult:
    id: str
    url: str
    title: str
    description: str
    duration: str
    views: str
    published_at: str
    channel_title: str
    thumbnail: str


def extract_video(renderer: Any) -> VideoResult | None:
    """
    Map one `videoRenderer` record onto a `VideoResult`.

    Returns None when the record has no usable id or title. Every other field
    degrades to a default when the upstream shape is missing or unexpected.
    """
    record = as_dict(renderer)
    video_id = as_str(record.get("videoId"))
    if not video_id:
        LOGGER.debug("skipping renderer without videoId keys=%s", sorted(record)[:10])
        return None

    title = clean_text(_join_runs(_runs(record.get("title"))))
    if not title:
        LOGGER.debug("skipping renderer with empty title video_id=%s", video_id)
        return None

    return VideoResult(
        id=video_id,
        url=f"{WATCH_URL_BASE}{video_id}",
        title=title,
        description=_extract_description(record),
        duration=format_runtime(_extract_duration_text(record)),
        views=format_count(_extract_view_count_text(record)),
        published_at=_simple_text(record.get("publishedTimeText")) or RECENT_PUBLISHED_LABEL,
        channel_title=clean_text(_extract_channel_name(record)),
        thumbnail=_extract_thumbnail_url(record, video_id=video_id),
    )


def as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        raw_dict = cast(dict[object, object], value)
        converted: dict[str, Any] = {}
        for key, item in raw_dict.items():
            if isinstance(key, str):
                converted[key] = item
        return converted
    return {}


def as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        raw_list = cast(list[Any], value)
        return list(raw_list)
    return []


def as_str(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    return None


def _runs(text_container: Any) -> list[Any]:
    return as_list(as_dict(text_container).get("runs"))


def _join_runs(runs: list[Any]) -> str:
    return " ".join(as_str(as_dict(run).get("text")) or "" for run in runs)


def _simple_text(text_container: Any) -> str | None:
    return as_str(as_dict(text_container).get("simpleText"))


def _extract_duration_text(record: dict[str, Any]) -> str | None:
    length_text = _simple_text(record.get("lengthText"))
    if length_text is not None:
        return length_text

    overlays = as_list(record.get("thumbnailOverlays"))
    if not overlays:
        return None
    time_status = as_dict(as_dict(overlays[0]).get("thumbnailOverlayTimeStatusRenderer"))
    return _simple_text(time_status.get("text"))


def _extract_view_count_text(record: dict[str, Any]) -> str | None:
    full_count = _simple_text(record.get("viewCountText"))
    if full_count is not None:
        return full_count
    return _simple_text(record.get("shortViewCountText"))


def _extract_channel_name(record: dict[str, Any]) -> str | None:
    owner_runs = as_dict(record.get("ownerText")).get("runs")
    if owner_runs is None:
        owner_runs = as_dict(record.get("longBylineText")).get("runs")
    runs = as_list(owner_runs)
    if not runs:
        return None
    return as_str(as_dict(runs[0]).get("text"))


def _extract_thumbnail_url(record: dict[str, Any], *, video_id: str) -> str:
    thumbnails = as_list(as_dict(record.get("thumbnail")).get("thumbnails"))
    if thumbnails:
        best_url = as_str(as_dict(thumbnails[-1]).get("url"))
        if best_url:
            return best_url
    return THUMBNAIL_FALLBACK_TEMPLATE.format(video_id=video_id)


def _extract_description(record: dict[str, Any]) -> str:
    # A non-empty snippet list wins even when its first entry has no runs.
    detailed = as_list(record.get("detailedMetadataSnippets"))
    if detailed:
        snippet_text = as_dict(detailed[0]).get("snippetText")
        return clean_text(_join_runs(_runs(snippet_text)))
    return clean_text(_join_runs(_runs(record.get("descriptionSnippet"))))

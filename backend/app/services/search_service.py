from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from backend.app.services.record_extractor import VideoResult, extract_video
from backend.app.services.tree_scanner import collect_renderers
from backend.app.telemetry import TelemetryClient

LOGGER = logging.getLogger("clipfinder.search")

INITIAL_DATA_START = "var ytInitialData = "
INITIAL_DATA_END = ";</script>"

DEFAULT_BASE_URL = "https://www.youtube.com"
DEFAULT_LANGUAGE = "pt-BR"
DEFAULT_ACCEPT_LANGUAGE = "pt-BR,pt;q=0.9"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class SearchServiceError(Exception):
    pass


class SearchFetchError(SearchServiceError):
    def __init__(self, message: str, *, status_code: int | None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SearchPayloadError(SearchServiceError):
    pass


@dataclass(frozen=True)
class SearchPage:
    status_code: int
    body: str


class YouTubeSearchService:
    """
    Scrapes the public search-results page and normalizes the embedded video records.

    Instances only hold configuration, so one service can serve concurrent
    requests. There are no retries; a hung upstream blocks the calling thread
    unless `http_timeout_seconds` is set.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        language: str = DEFAULT_LANGUAGE,
        accept_language: str = DEFAULT_ACCEPT_LANGUAGE,
        user_agent: str = DEFAULT_USER_AGENT,
        http_timeout_seconds: float | None = None,
        max_scan_nodes: int | None = None,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._accept_language = accept_language
        self._user_agent = user_agent
        self._http_timeout_seconds = http_timeout_seconds
        self._max_scan_nodes = max_scan_nodes
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()

    def build_search_url(self, query: str) -> str:
        params = urlencode({"search_query": query, "hl": self._language})
        return f"{self._base_url}/results?{params}"

    def search(self, query: str, max_results: int) -> list[VideoResult]:
        limit = max(1, max_results)
        with self._telemetry.span("search.fetch", max_results=limit) as span:
            page = _fetch_search_page(
                url=self.build_search_url(query),
                headers=self._request_headers(),
                timeout_seconds=self._http_timeout_seconds,
            )
            span.set(status_code=page.status_code)
            if not 200 <= page.status_code < 300:
                raise SearchFetchError(
                    f"YouTube search failed with status {page.status_code}",
                    status_code=page.status_code,
                )

            videos, renderer_count = self._extract_videos(page.body, limit=limit)
            span.set(renderer_count=renderer_count, result_count=len(videos))

        LOGGER.info(
            "youtube search completed status=%s renderers=%s results=%s limit=%s",
            page.status_code,
            renderer_count,
            len(videos),
            limit,
        )
        return videos

    def _request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._user_agent,
            "Accept-Language": self._accept_language,
            "Accept": "text/html,application/xhtml+xml",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

    def _extract_videos(self, html: str, *, limit: int) -> tuple[list[VideoResult], int]:
        payload_text = extract_initial_data(html)
        if payload_text is None:
            LOGGER.info("youtube search page has no embedded initial data; returning no results")
            return [], 0

        try:
            data = json.loads(payload_text)
        except json.JSONDecodeError as exc:
            raise SearchPayloadError(
                f"Embedded search payload is not valid JSON: {exc.msg} (position {exc.pos})"
            ) from exc

        renderers = collect_renderers(data, max_nodes=self._max_scan_nodes)
        videos: list[VideoResult] = []
        for renderer in renderers:
            if len(videos) >= limit:
                break
            video = extract_video(renderer)
            if video is not None:
                videos.append(video)
        return videos, len(renderers)


def extract_initial_data(html: str) -> str | None:
    _, found_start, after_start = html.partition(INITIAL_DATA_START)
    if not found_start:
        return None
    payload, found_end, _ = after_start.partition(INITIAL_DATA_END)
    if not found_end or not payload.strip():
        return None
    return payload


def _fetch_search_page(
    *,
    url: str,
    headers: dict[str, str],
    timeout_seconds: float | None,
) -> SearchPage:
    request = Request(url, headers=headers, method="GET")
    try:
        response_context = (
            urlopen(request) if timeout_seconds is None else urlopen(request, timeout=timeout_seconds)
        )
        with response_context as response:
            status_code = int(response.getcode() or 0)
            charset = response.headers.get_content_charset() or "utf-8"
            body = response.read().decode(charset, errors="replace")
    except HTTPError as exc:
        exc.close()
        return SearchPage(status_code=int(exc.code), body="")
    except (URLError, TimeoutError, OSError) as exc:
        raise SearchFetchError(f"YouTube search request failed: {exc}", status_code=None) from exc
    return SearchPage(status_code=status_code, body=body)

from __future__ import annotations

from functools import lru_cache

from backend.app.config import AppSettings, load_settings
from backend.app.services.search_service import YouTubeSearchService
from backend.app.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


@lru_cache(maxsize=1)
def get_search_service() -> YouTubeSearchService:
    return build_search_service(get_settings(), telemetry=get_telemetry())


def build_search_service(
    settings: AppSettings,
    *,
    telemetry: TelemetryClient | None = None,
) -> YouTubeSearchService:
    return YouTubeSearchService(
        base_url=settings.search_base_url,
        language=settings.search_language,
        accept_language=settings.search_accept_language,
        user_agent=settings.search_user_agent,
        http_timeout_seconds=settings.search_http_timeout_seconds,
        max_scan_nodes=settings.search_max_scan_nodes,
        telemetry=telemetry,
    )


def reset_cached_dependencies() -> None:
    get_search_service.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()

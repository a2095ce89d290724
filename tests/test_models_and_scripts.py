from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, cast

import pytest

from backend.app.models.search_contracts import SearchResponse, VideoResultModel
from backend.app.scripts import search_videos
from backend.app.scripts.export_openapi import main as export_openapi
from backend.app.services.record_extractor import VideoResult
from backend.app.services.search_service import SearchPage


def _video() -> VideoResult:
    return VideoResult(
        id="abcDEF12345",
        url="https://www.youtube.com/watch?v=abcDEF12345",
        title="Título",
        description="",
        duration="3:07",
        views="950",
        published_at="há 1 dia",
        channel_title="Canal",
        thumbnail="https://i.ytimg.com/vi/abcDEF12345/hqdefault.jpg",
    )


def test_search_response_serializes_with_camel_case_aliases() -> None:
    response = SearchResponse(
        query="gatos",
        items=[VideoResultModel.from_result(_video())],
        generated_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
    )

    dumped = response.model_dump(mode="json", by_alias=True)

    assert dumped["generatedAt"].startswith("2026-01-02T03:04:05")
    assert dumped["items"][0]["publishedAt"] == "há 1 dia"
    assert dumped["items"][0]["channelTitle"] == "Canal"
    assert "published_at" not in dumped["items"][0]


def test_export_openapi_writes_schema(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    export_openapi([])

    output = tmp_path / "openapi" / "openapi.json"
    assert output.exists()

    schema = cast(dict[str, Any], json.loads(output.read_text(encoding="utf-8")))
    assert schema["info"]["title"] == "Clipfinder API"
    assert "/api/search" in schema["paths"]
    assert "400" in schema["paths"]["/api/search"]["post"]["responses"]


def test_search_videos_script_prints_json(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    search_results_html: str,
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLIPFINDER_DATA_DIR", str(tmp_path))

    def _fake_fetch(*, url: str, headers: dict[str, str], timeout_seconds: float | None) -> SearchPage:
        _ = (url, headers, timeout_seconds)
        return SearchPage(status_code=200, body=search_results_html)

    monkeypatch.setattr("backend.app.services.search_service._fetch_search_page", _fake_fetch)

    exit_code = search_videos.main(["bolo de cenoura", "--max", "1", "--json"])

    assert exit_code == 0
    printed = json.loads(capsys.readouterr().out)
    # --max 1 is clamped up to the configured minimum of 3.
    assert [item["id"] for item in printed] == ["abcDEF12345", "mnoPQR13579", "ghiJKL67890"]
    assert printed[0]["channel_title"] == "Cozinha da Vovó"


def test_search_videos_script_rejects_blank_query(capsys: pytest.CaptureFixture[str]) -> None:
    assert search_videos.main(["   "]) == 2
    assert "non-empty query" in capsys.readouterr().out

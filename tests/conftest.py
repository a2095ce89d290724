from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.app.dependencies import reset_cached_dependencies
from backend.app.main import create_app

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def search_results_html() -> str:
    return (FIXTURES_DIR / "search_results.html").read_text(encoding="utf-8")


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("CLIPFINDER_DATA_DIR", str(data_dir))
    monkeypatch.setenv("CLIPFINDER_TELEMETRY_SINK", "none")
    monkeypatch.delenv("CLIPFINDER_SEARCH_MIN_RESULTS", raising=False)
    monkeypatch.delenv("CLIPFINDER_SEARCH_MAX_RESULTS", raising=False)
    monkeypatch.delenv("CLIPFINDER_SEARCH_DEFAULT_RESULTS", raising=False)
    reset_cached_dependencies()

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client

    reset_cached_dependencies()

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from structlog.contextvars import bind_contextvars, reset_contextvars

from backend.app.config import AppSettings
from backend.app.dependencies import get_search_service, get_settings
from backend.app.models.search_contracts import (
    SearchErrorResponse,
    SearchRequest,
    SearchResponse,
    VideoResultModel,
)
from backend.app.services.search_service import YouTubeSearchService

router = APIRouter()

LOGGER = logging.getLogger("clipfinder.api")

MISSING_QUERY_MESSAGE = "Informe um termo para pesquisa."
INVALID_REQUEST_MESSAGE = "Requisição de busca inválida."
SEARCH_FAILED_MESSAGE = (
    "Não foi possível concluir a busca no momento. Tente novamente em instantes."
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=SearchErrorResponse(error=message).model_dump(),
    )


@router.post(
    "/api/search",
    response_model=SearchResponse,
    responses={
        400: {"model": SearchErrorResponse},
        500: {"model": SearchErrorResponse},
    },
    tags=["search"],
    operation_id="search_videos",
)
def search_videos(
    request: SearchRequest,
    settings: Annotated[AppSettings, Depends(get_settings)],
    search_service: Annotated[YouTubeSearchService, Depends(get_search_service)],
) -> SearchResponse | JSONResponse:
    query = (request.query or "").strip()
    if not query:
        return error_response(400, MISSING_QUERY_MESSAGE)

    max_results = settings.clamp_result_count(request.max)
    context_tokens = bind_contextvars(search_max_results=max_results)
    try:
        videos = search_service.search(query, max_results)
    except Exception:
        LOGGER.exception("youtube search failed max_results=%s", max_results)
        return error_response(500, SEARCH_FAILED_MESSAGE)
    finally:
        reset_contextvars(**context_tokens)

    return SearchResponse(
        query=query,
        items=[VideoResultModel.from_result(video) for video in videos],
        generated_at=datetime.now(UTC),
    )

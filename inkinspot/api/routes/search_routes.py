"""Search Routes (Engine Layer)

HTTP Layer는 요청 예산을 세우고 Engine Layer에 위임한 뒤,
실패를 ErrorKind 기준으로 상태 코드에 매핑하는 Translator 역할만 수행합니다.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkinspot.core.logging import logger, sanitize_for_log
from inkinspot.engine import (
    Budget,
    ErrorKind,
    ImageCollection,
    SearchEngine,
    classify,
    with_timeout,
)
from inkinspot.schemas.search_schema import SearchResponse
from inkinspot.utils.text import normalize_query

router = APIRouter(tags=["search"])

SEARCH_PATH = "/search"
ALLOWED_METHODS = ["GET"]

# 분류 결과 → HTTP 상태 (없는 kind는 500)
_STATUS_BY_KIND = {
    ErrorKind.EMPTY_QUERY: 400,
    ErrorKind.STORE_TIMEOUT: 504,
    ErrorKind.STORE_EMPTY: 500,
    ErrorKind.STORE_UNAVAILABLE: 500,
}


def get_search_engine(request: Request) -> SearchEngine:
    """앱에 주입된 SearchEngine 반환 (create_app에서 설정)"""
    engine = getattr(request.app.state, "search_engine", None)
    if engine is None:
        raise RuntimeError("Search engine is not configured")
    return engine


def get_search_timeout(request: Request) -> float:
    """요청 전체 예산 (초)"""
    return request.app.state.search_timeout_s


@router.get(SEARCH_PATH, response_model=SearchResponse)
async def search(
    request: Request,
    q: str = "",
    engine: SearchEngine = Depends(get_search_engine),
    timeout_s: float = Depends(get_search_timeout),
):
    """타투 이미지 검색 API

    Flow:
        1. 요청 전체 예산 설정 (클라이언트 연결 종료 시 취소)
        2. 쿼리 정규화
        3. Engine에 위임 (VectorStore → ImageStore)
        4. 결과/실패를 HTTP Response로 변환
    """
    query = normalize_query(q)
    logger.info(f"[API] Search request: query='{sanitize_for_log(query)}'")

    request_budget, release = with_timeout(Budget.background(), timeout_s)
    watcher = asyncio.create_task(_cancel_on_disconnect(request, request_budget))
    try:
        collections = await engine.search(request_budget, query)
    except Exception as e:
        return _error_response(e, query)
    finally:
        watcher.cancel()
        release()

    return _respond(200, collections)


async def search_method_not_allowed(request: Request, exc: StarletteHTTPException):
    """/search의 GET 이외 메서드는 쿼리와 무관하게 405 + 빈 컬렉션 바디

    라우팅 단계의 405를 가로채므로 메서드 종류(TRACE, 커스텀 동사 등)에 관계없이 적용됩니다.
    그 외 HTTPException은 FastAPI 기본 처리로 넘깁니다.
    """
    if exc.status_code != 405 or request.url.path != SEARCH_PATH:
        return await http_exception_handler(request, exc)

    logger.info(f"[API] Method not allowed: method={sanitize_for_log(request.method)}")
    return _respond(405, headers={"Allow": ", ".join(ALLOWED_METHODS)})


async def _cancel_on_disconnect(request: Request, budget: Budget) -> None:
    """클라이언트가 연결을 끊으면 요청 예산 취소 (진행 중인 하위 호출도 함께 취소)"""
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            logger.info("[API] Client disconnected: cancelling search")
            budget.cancel()
            return


def _error_response(error: Exception, query: str) -> JSONResponse:
    """실패를 상태 코드로 변환 (바디에는 오류 정보를 노출하지 않음)"""
    kind = classify(error)
    status_code = _STATUS_BY_KIND.get(kind, 500)

    if kind == ErrorKind.UNCATEGORIZED:
        logger.error(
            f"[API] Search failed: query='{sanitize_for_log(query)}', error={type(error).__name__}",
            exc_info=error,
        )
    elif status_code >= 500:
        logger.warning(f"[API] Search failed: query='{sanitize_for_log(query)}', kind={kind.value}")
    else:
        logger.info(f"[API] Search rejected: query='{sanitize_for_log(query)}', kind={kind.value}")

    return _respond(status_code)


def _respond(
    status_code: int,
    collections: Optional[list[ImageCollection]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = SearchResponse.from_collections(collections or [])
    return JSONResponse(status_code=status_code, content=body.to_wire(), headers=headers)

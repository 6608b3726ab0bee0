"""FastAPI 앱 팩토리"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from inkinspot.core.config import Settings, settings
from inkinspot.core.logging import logger
from inkinspot.api import health_router, search_method_not_allowed, search_router
from inkinspot.engine import SearchEngine, TimeoutPolicy
from inkinspot.stores import InMemoryImageStore, InMemoryVectorStore, load_catalog


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info("Starting application...")
    policy = app.state.search_engine.timeout_policy
    logger.info(
        f"Search budgets: request={app.state.search_timeout_s * 1000:.0f}ms, "
        f"vector={policy.vector_store_timeout * 1000:.0f}ms, "
        f"image={policy.image_store_timeout * 1000:.0f}ms"
    )
    yield
    logger.info("Shutting down application...")


def build_default_engine(config: Settings = settings) -> SearchEngine:
    """인메모리 저장소 기반 SearchEngine 생성 (catalog_path가 있으면 적재)"""
    image_store = InMemoryImageStore()
    vector_store = InMemoryVectorStore(match_threshold=config.match_threshold)

    if config.catalog_path:
        load_catalog(config.catalog_path, image_store, vector_store)
    else:
        logger.warning("No catalog configured; starting with empty stores")

    return SearchEngine(
        vector_store=vector_store,
        image_store=image_store,
        timeout_policy=TimeoutPolicy.from_settings(config),
    )


def create_app(engine: Optional[SearchEngine] = None, config: Settings = settings) -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Args:
        engine: 주입할 SearchEngine (없으면 인메모리 저장소로 생성)
        config: 설정

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=config.api_title,
        description=config.api_description,
        version=config.api_version,
        lifespan=lifespan
    )

    # 요청 간 공유되는 불변 의존성
    app.state.search_engine = engine or build_default_engine(config)
    app.state.search_timeout_s = config.api_search_timeout_ms / 1000

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(search_router)

    # /search 405 응답도 동일한 바디 모양 유지
    app.add_exception_handler(StarletteHTTPException, search_method_not_allowed)

    return app

# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()

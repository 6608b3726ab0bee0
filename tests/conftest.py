"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 저장소 주입

금지:
- 실제 벡터 검색/이미지 저장소 호출
"""

from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

os.environ.setdefault("ENVIRONMENT", "test")

from inkinspot.engine import Budget, ImageCollection, SearchEngine, TimeoutPolicy  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@dataclass
class FakeVectorStore:
    """오케스트레이터 테스트용 벡터 저장소

    - ids: 반환할 ID 목록 (순서 그대로)
    - error: 설정 시 해당 예외 발생
    - delay: 응답 지연 (초)
    """

    ids: list[str] = field(default_factory=list)
    error: Optional[Exception] = None
    delay: float = 0.0
    queries: list[str] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)
    cancelled: bool = False

    async def get_ids_by_query(self, budget: Budget, query: str) -> list[str]:
        self.queries.append(query)
        self.budgets.append(budget)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error:
            raise self.error
        return list(self.ids)


@dataclass
class FakeImageStore:
    """오케스트레이터 테스트용 이미지 저장소

    - collections: 보유 컬렉션. 요청 ID 순서대로 반환
    - verbatim: 설정 시 요청과 무관하게 이 목록을 그대로 반환
    """

    collections: dict[str, ImageCollection] = field(default_factory=dict)
    verbatim: Optional[list[ImageCollection]] = None
    error: Optional[Exception] = None
    delay: float = 0.0
    requests: list[list[str]] = field(default_factory=list)
    budgets: list[Budget] = field(default_factory=list)

    async def get_collections_by_ids(self, budget: Budget, ids: list[str]) -> list[ImageCollection]:
        self.requests.append(list(ids))
        self.budgets.append(budget)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        if self.verbatim is not None:
            return list(self.verbatim)
        return [self.collections[i] for i in ids if i in self.collections]


@pytest.fixture
def vector_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture
def image_store() -> FakeImageStore:
    return FakeImageStore()


@pytest.fixture
def timeout_policy() -> TimeoutPolicy:
    return TimeoutPolicy(vector_store_timeout=0.05, image_store_timeout=0.05)


@pytest.fixture
def engine(vector_store, image_store, timeout_policy) -> SearchEngine:
    return SearchEngine(
        vector_store=vector_store,
        image_store=image_store,
        timeout_policy=timeout_policy,
    )

"""Search Orchestrator - Main Engine Entry Point

Coordinates the two-stage search pipeline:
1. Query normalization
2. Vector lookup (query → ordered IDs)
3. Image lookup (IDs → ordered image collections)

각 단계는 요청 예산에서 파생된 단계 예산 안에서만 실행됩니다.
오케스트레이터는 예외를 삼키거나 재분류하지 않습니다 (분류는 HTTP 계층 책임).
"""

import logging
from time import monotonic
from typing import Optional

from inkinspot.core.logging import logger, sanitize_for_log
from inkinspot.utils.text import normalize_query

from .budget import Budget, tight_budget
from .exceptions import SearchError
from .models import ImageCollection, ImageStore, TimeoutPolicy, VectorStore


class SearchEngine:
    """타투 이미지 검색 엔진

    VectorStore → ImageStore 순서로 호출하며, 생성 이후 상태를 바꾸지 않으므로
    여러 요청에서 동시에 재사용해도 안전합니다.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        image_store: ImageStore,
        timeout_policy: Optional[TimeoutPolicy] = None,
    ):
        """
        Args:
            vector_store: 벡터 저장소 (get_ids_by_query 구현)
            image_store: 이미지 저장소 (get_collections_by_ids 구현)
            timeout_policy: 단계별 예산 (기본값: 각 200ms)
        """
        if vector_store is None:
            raise ValueError("vector_store must not be None")
        if image_store is None:
            raise ValueError("image_store must not be None")

        self._vector_store = vector_store
        self._image_store = image_store
        self._timeout_policy = timeout_policy or TimeoutPolicy()

    @property
    def timeout_policy(self) -> TimeoutPolicy:
        return self._timeout_policy

    async def search(self, parent: Budget, query: str) -> list[ImageCollection]:
        """검색 실행

        Args:
            parent: 요청 예산 (단계 예산은 항상 이 안에 들어감)
            query: 원본 검색어

        Returns:
            list[ImageCollection]: 이미지 저장소가 돌려준 순서 그대로의 컬렉션

        Raises:
            SearchError: 검색어가 비었거나(EMPTY_QUERY) 예산이 만료/취소된 경우
            Exception: 저장소가 발생시킨 예외 (그대로 전달)
        """
        query = normalize_query(query)
        if not query:
            raise SearchError.empty_query()

        started = monotonic()
        logger.debug(f"Search started: query='{sanitize_for_log(query)}'")

        ids = await self._lookup_ids(parent, query)
        collections = await self._lookup_collections(parent, ids)

        logger.info(
            f"Search completed: query='{sanitize_for_log(query)}', "
            f"ids={len(ids)}, collections={len(collections)}, "
            f"elapsed={(monotonic() - started) * 1000:.1f}ms"
        )
        return collections

    async def _lookup_ids(self, parent: Budget, query: str) -> list[str]:
        """벡터 저장소 조회 (1단계)"""
        started = monotonic()
        with tight_budget(parent, self._timeout_policy.vector_store_timeout) as budget:
            try:
                ids = await budget.run(self._vector_store.get_ids_by_query(budget, query))
            except Exception as e:
                logger.warning(
                    f"Vector lookup failed: error={type(e).__name__}, "
                    f"elapsed={(monotonic() - started) * 1000:.1f}ms"
                )
                raise

        logger.debug(f"Vector lookup: ids={len(ids)}, elapsed={(monotonic() - started) * 1000:.1f}ms")
        return list(ids)

    async def _lookup_collections(self, parent: Budget, ids: list[str]) -> list[ImageCollection]:
        """이미지 저장소 조회 (2단계)"""
        started = monotonic()
        with tight_budget(parent, self._timeout_policy.image_store_timeout) as budget:
            try:
                collections = await budget.run(
                    self._image_store.get_collections_by_ids(budget, ids)
                )
            except Exception as e:
                logger.warning(
                    f"Image lookup failed: error={type(e).__name__}, "
                    f"elapsed={(monotonic() - started) * 1000:.1f}ms"
                )
                raise

        logger.debug(
            f"Image lookup: collections={len(collections)}, "
            f"elapsed={(monotonic() - started) * 1000:.1f}ms"
        )
        return self._drop_unrequested(ids, collections)

    @staticmethod
    def _drop_unrequested(
        ids: list[str], collections: list[ImageCollection]
    ) -> list[ImageCollection]:
        """요청하지 않은 ID의 컬렉션 제거

        순서는 이미지 저장소가 돌려준 그대로 유지합니다 (재정렬하지 않음).
        """
        requested = set(ids)
        kept = [c for c in collections if c.id in requested]

        if len(kept) != len(collections):
            logger.warning(
                f"Image store returned unrequested collections: dropped={len(collections) - len(kept)}"
            )
        if logger.isEnabledFor(logging.DEBUG):
            returned = [c.id for c in kept]
            returned_set = set(returned)
            if returned != [i for i in ids if i in returned_set]:
                logger.debug("Image store order differs from requested ID order; passing through")

        return kept

"""In-memory stores - Reference VectorStore / ImageStore implementations

실제 임베딩 검색/이미지 영속화 서비스를 대신하는 인메모리 구현입니다.
로컬 실행과 통합 테스트에서 사용하며, 랭킹은 단순한 라벨 매칭 점수입니다.
"""

from __future__ import annotations

from typing import Optional

from rapidfuzz import fuzz

from inkinspot.core.config import settings
from inkinspot.core.logging import logger
from inkinspot.engine.budget import Budget
from inkinspot.engine.exceptions import SearchError
from inkinspot.engine.models import ImageCollection, ImageVector, LabelSet
from inkinspot.utils.text import normalize_query, tokenize_query


class InMemoryImageStore:
    """ID → ImageCollection 인메모리 저장소"""

    def __init__(self, collections: Optional[list[ImageCollection]] = None):
        self._collections: dict[str, ImageCollection] = {}
        for collection in collections or []:
            self.add_collection(collection)

    def __len__(self) -> int:
        return len(self._collections)

    def add_collection(self, collection: ImageCollection) -> None:
        """컬렉션 추가 (같은 ID면 덮어씀)"""
        if not collection.id:
            raise ValueError("collection id must not be empty")
        self._collections[collection.id] = collection

    async def get_collections_by_ids(
        self, budget: Budget, ids: list[str]
    ) -> list[ImageCollection]:
        """요청한 ID 순서대로 컬렉션 반환 (없는 ID는 건너뜀)

        Raises:
            SearchError: 저장소가 비어 있음(STORE_EMPTY) 또는 예산 종료
        """
        budget.check()
        if not self._collections:
            raise SearchError.store_empty("image store")

        found = [self._collections[i] for i in ids if i in self._collections]
        if len(found) != len(ids):
            logger.debug(f"Image store: missing ids={len(ids) - len(found)}")
        return found


class InMemoryVectorStore:
    """라벨 매칭 기반 인메모리 벡터 저장소

    검색어 토큰과 각 벡터의 라벨(style/subject/area)을 rapidfuzz ratio로 비교하고,
    임계값 이상으로 매칭된 라벨 가중치를 유사도 비율만큼 합산합니다.
    """

    def __init__(
        self,
        vectors: Optional[list[ImageVector]] = None,
        match_threshold: Optional[float] = None,
    ):
        self._vectors: dict[str, ImageVector] = {}
        self._match_threshold = (
            settings.match_threshold if match_threshold is None else match_threshold
        )
        for vector in vectors or []:
            self.add_vector(vector)

    def __len__(self) -> int:
        return len(self._vectors)

    def add_vector(self, vector: ImageVector) -> None:
        """벡터 추가 (같은 ID면 덮어씀)"""
        if not vector.id:
            raise ValueError("vector id must not be empty")
        self._vectors[vector.id] = vector

    async def get_ids_by_query(self, budget: Budget, query: str) -> list[str]:
        """검색어와 매칭되는 ID를 점수 내림차순으로 반환 (동점은 ID 오름차순)"""
        budget.check()
        tokens = tokenize_query(normalize_query(query))
        if not tokens:
            return []

        scored: list[tuple[float, str]] = []
        for vector in self._vectors.values():
            score = sum(self._score_labels(tokens, labels) for labels in vector.label_sets())
            if score > 0:
                scored.append((score, vector.id))

        scored.sort(key=lambda item: (-item[0], item[1]))
        return [vector_id for _, vector_id in scored]

    def _score_labels(self, tokens: list[str], labels: LabelSet) -> float:
        score = 0.0
        for tag, weight in labels.items():
            tag = tag.lower()
            best = max(fuzz.ratio(token, tag) for token in tokens)
            if best >= self._match_threshold:
                score += weight * best / 100.0
        return score

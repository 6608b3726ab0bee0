"""Domain Models - Tattoo images, vectors and collaborator contracts"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from inkinspot.core.config import Settings, settings as default_settings

from .budget import Budget

# 태그 → 근접도 가중치 (보통 0~100)
LabelSet = dict[str, float]


def _validate_label_set(name: str, labels: LabelSet) -> None:
    for tag, weight in labels.items():
        if weight < 0:
            raise ValueError(f"{name} weight for '{tag}' must be non-negative: {weight}")


@dataclass(frozen=True)
class ImageVector:
    """타투 이미지의 임베딩 특성

    Attributes:
        id: 컬렉션 ID
        style: 스타일 라벨 (realistic, bw, ...)
        subject: 주제 라벨 (lion, sword, ...)
        area: 부위 라벨 (arm, chest, ...)
    """

    id: str
    style: LabelSet = field(default_factory=dict)
    subject: LabelSet = field(default_factory=dict)
    area: LabelSet = field(default_factory=dict)

    def __post_init__(self):
        _validate_label_set("style", self.style)
        _validate_label_set("subject", self.subject)
        _validate_label_set("area", self.area)

    def label_sets(self) -> tuple[LabelSet, LabelSet, LabelSet]:
        return (self.style, self.subject, self.area)


@dataclass(frozen=True)
class ImageCollection:
    """타투 이미지 컬렉션. urls 순서가 곧 노출 순서"""

    id: str
    urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class TimeoutPolicy:
    """하위 저장소별 예산 (초)"""

    vector_store_timeout: float = 0.2
    image_store_timeout: float = 0.2

    def __post_init__(self):
        if self.vector_store_timeout <= 0:
            raise ValueError("vector_store_timeout must be positive")
        if self.image_store_timeout <= 0:
            raise ValueError("image_store_timeout must be positive")

    @classmethod
    def from_settings(cls, config: Settings = default_settings) -> TimeoutPolicy:
        return cls(
            vector_store_timeout=config.vector_store_timeout_ms / 1000,
            image_store_timeout=config.image_store_timeout_ms / 1000,
        )


class VectorStore(Protocol):
    """임베딩 데이터를 보관하는 서비스 계약

    budget의 취소 신호를 존중해야 합니다.
    """

    async def get_ids_by_query(self, budget: Budget, query: str) -> list[str]:
        ...


class ImageStore(Protocol):
    """타투 이미지를 보관하는 서비스 계약

    반환 순서는 요청한 ID 순서를 따라야 합니다.
    """

    async def get_collections_by_ids(
        self, budget: Budget, ids: list[str]
    ) -> list[ImageCollection]:
        ...

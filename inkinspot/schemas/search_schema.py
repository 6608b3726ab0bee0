"""Pydantic 스키마 정의 (검색 API 응답)"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field

from inkinspot.engine.models import ImageCollection


class ImageCollectionSchema(BaseModel):
    """타투 이미지 컬렉션 (와이어 포맷: ID / URLs)"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="ID", description="컬렉션 ID")
    urls: List[str] = Field(default_factory=list, alias="URLs", description="이미지 URL (노출 순서)")

    @classmethod
    def from_domain(cls, collection: ImageCollection) -> "ImageCollectionSchema":
        return cls(id=collection.id, urls=list(collection.urls))


class SearchResponse(BaseModel):
    """검색 응답

    상태 코드와 무관하게 항상 같은 모양입니다 (image_collections는 null이 아닌 빈 배열).
    """
    image_collections: List[ImageCollectionSchema] = Field(
        default_factory=list, description="순서가 보존된 이미지 컬렉션"
    )

    @classmethod
    def from_collections(cls, collections: List[ImageCollection]) -> "SearchResponse":
        return cls(image_collections=[ImageCollectionSchema.from_domain(c) for c in collections])

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str = Field(..., description="ok")
    version: str = Field(..., description="서비스 버전")

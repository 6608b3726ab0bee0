"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 검색 API 전체 예산
    # 요청 하나가 쓸 수 있는 최대 시간. 하위 단계 예산은 항상 이 안에 들어갑니다.
    api_search_timeout_ms: int = 300

    # 하위 저장소별 예산 (단계별 상한)
    vector_store_timeout_ms: int = 200
    image_store_timeout_ms: int = 200

    # 인메모리 벡터 저장소의 라벨 매칭 하한 (rapidfuzz ratio, 0~100)
    match_threshold: float = 85.0

    # 시작 시 적재할 카탈로그(YAML). 비어 있으면 빈 저장소로 시작
    catalog_path: Optional[str] = None

    # API
    api_title: str = "타투 이미지 검색 서비스"
    api_version: str = "1.0.0"
    api_description: str = "벡터 후보 검색 → 이미지 컬렉션 조회를 하나의 예산 안에서 수행합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("api_search_timeout_ms", "vector_store_timeout_ms", "image_store_timeout_ms")
    @classmethod
    def validate_timeouts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("match_threshold")
    @classmethod
    def validate_match_threshold(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("match_threshold must be between 0 and 100")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()

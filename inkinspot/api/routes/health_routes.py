"""헬스 체크 엔드포인트"""
from fastapi import APIRouter

from inkinspot import __version__
from inkinspot.schemas.search_schema import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """헬스 체크 엔드포인트"""
    return HealthResponse(status="ok", version=__version__)

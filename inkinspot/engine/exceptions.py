"""Search Exceptions - Tagged error type for the search engine

검색 엔진에서 발생하는 모든 실패를 하나의 예외 타입(SearchError)으로 표현합니다.
실패 종류는 ErrorKind로 구분하며, 분류는 메시지가 아니라 kind로만 수행합니다.
"""

from asyncio import TimeoutError as AsyncTimeoutError
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """실패 종류"""

    EMPTY_QUERY = "empty_query"  # 정규화 후 검색어가 비어 있음 (클라이언트 책임)
    STORE_TIMEOUT = "store_timeout"  # 하위 호출이 예산을 초과
    STORE_UNAVAILABLE = "store_unavailable"  # 저장소 연결 불가
    STORE_EMPTY = "store_empty"  # 저장소에 데이터가 없음
    CANCELLED = "cancelled"  # 상위 예산이 명시적으로 취소됨
    UNCATEGORIZED = "uncategorized"  # 분류 불가 (서버 오류로 취급)


class SearchError(Exception):
    """검색 엔진 예외

    Attributes:
        kind: 실패 종류
        message: 사람이 읽을 수 있는 설명 (응답 바디에는 노출하지 않음)
        cause: 원인 예외 (선택)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str = "",
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.message = message or kind.value
        self.cause = cause
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __repr__(self) -> str:
        return f"SearchError(kind={self.kind.value!r}, message={self.message!r})"

    @classmethod
    def empty_query(cls) -> "SearchError":
        return cls(ErrorKind.EMPTY_QUERY, "search query is empty")

    @classmethod
    def store_timeout(
        cls, operation: str = "downstream call", cause: Optional[BaseException] = None
    ) -> "SearchError":
        return cls(ErrorKind.STORE_TIMEOUT, f"{operation} exceeded its deadline", cause)

    @classmethod
    def store_unavailable(
        cls, store: str, cause: Optional[BaseException] = None
    ) -> "SearchError":
        return cls(ErrorKind.STORE_UNAVAILABLE, f"{store} is unavailable", cause)

    @classmethod
    def store_empty(cls, store: str) -> "SearchError":
        return cls(ErrorKind.STORE_EMPTY, f"{store} is empty")

    @classmethod
    def cancelled(cls) -> "SearchError":
        return cls(ErrorKind.CANCELLED, "budget cancelled")

    @classmethod
    def uncategorized(cls, cause: BaseException) -> "SearchError":
        return cls(ErrorKind.UNCATEGORIZED, type(cause).__name__, cause)


def classify(error: BaseException) -> ErrorKind:
    """예외를 ErrorKind로 분류

    Args:
        error: 검색 중 발생한 예외

    Returns:
        ErrorKind: SearchError면 그 kind, TimeoutError(asyncio 포함)면 STORE_TIMEOUT,
        그 외에는 UNCATEGORIZED
    """
    if isinstance(error, SearchError):
        return error.kind
    if isinstance(error, (AsyncTimeoutError, TimeoutError)):
        return ErrorKind.STORE_TIMEOUT
    return ErrorKind.UNCATEGORIZED

"""Budget - Cancellable Time Budgets (Deadline Composition)

요청 하나의 전체 예산을 하위 호출(벡터 저장소, 이미지 저장소)에 나눠 주는 계층입니다.

예산 합성 규칙 (derive_budget):
- 부모에 마감이 없음: 지금부터 desired 뒤에 만료
- 부모 마감이 (지금 + desired)보다 빠름: 부모의 취소를 그대로 상속 (새 마감 없음)
- 그 외: (지금 + desired)에 만료, 부모가 먼저 끝나면 함께 취소

모든 파생 예산은 release()로 해제해야 합니다 (타이머 해제 + 부모에서 분리).
"""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from time import monotonic
from typing import Awaitable, Callable, Iterator, Optional, TypeVar

from .exceptions import SearchError

T = TypeVar("T")
Release = Callable[[], None]


class Budget:
    """취소 가능한 시간 예산

    하위 호출에는 항상 인자로 전달합니다 (전역/스레드 로컬 상태 사용 금지).

    Usage:
        root = Budget.background()
        budget, release = with_timeout(root, 0.3)
        try:
            ids = await budget.run(store.get_ids_by_query(budget, query))
        finally:
            release()
    """

    def __init__(self, parent: Optional[Budget] = None, deadline: Optional[float] = None):
        self._parent = parent
        self._deadline = deadline
        self._error: Optional[SearchError] = None
        self._done = asyncio.Event()
        self._children: set[Budget] = set()
        self._timer: Optional[asyncio.TimerHandle] = None

        if parent is not None:
            if parent.error is not None:
                self._finish(parent.error)
            else:
                parent._children.add(self)

    @classmethod
    def background(cls) -> Budget:
        """마감도 취소도 없는 루트 예산"""
        return cls()

    @property
    def deadline(self) -> Optional[float]:
        """실효 마감 시각 (monotonic 기준). 자신의 마감이 없으면 부모의 마감"""
        if self._deadline is not None:
            return self._deadline
        if self._parent is not None:
            return self._parent.deadline
        return None

    @property
    def error(self) -> Optional[SearchError]:
        """예산이 끝난 이유. 아직 유효하면 None"""
        return self._error

    def remaining(self) -> Optional[float]:
        """남은 시간 (초). 마감이 없으면 None, 음수가 되지 않도록 보장"""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(0.0, deadline - monotonic())

    def done(self) -> bool:
        return self._error is not None

    async def wait(self) -> None:
        """예산이 끝날 때까지 대기"""
        await self._done.wait()

    def check(self) -> None:
        """예산이 끝났으면 그 이유를 예외로 발생

        Raises:
            SearchError: 만료(STORE_TIMEOUT) 또는 취소(CANCELLED)
        """
        if self._error is not None:
            raise self._exception()

    def cancel(self) -> None:
        """예산 취소 (자식 예산까지 전파). 여러 번 호출해도 안전"""
        self._finish(SearchError.cancelled())

    async def run(self, awaitable: Awaitable[T]) -> T:
        """예산 안에서 하위 호출을 기다림

        호출이 먼저 끝나면 그 결과(또는 예외)를 그대로 돌려주고,
        예산이 먼저 끝나면 진행 중인 호출을 취소한 뒤 예산 오류를 발생시킵니다.

        Args:
            awaitable: 하위 호출 (코루틴 등)

        Returns:
            하위 호출의 결과

        Raises:
            SearchError: 예산 만료/취소
            Exception: 하위 호출이 발생시킨 예외 (변형 없이 전달)
        """
        if self._error is not None:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self._exception()

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            # 상위 태스크 취소(클라이언트 연결 종료 등)는 진행 중인 호출까지 취소
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            return task.result()

        task.cancel()
        task.add_done_callback(_consume_result)
        raise self._exception()

    def _exception(self) -> SearchError:
        error = self._error
        assert error is not None
        return SearchError(error.kind, error.message, error.cause)

    def _start_timer(self) -> None:
        if self._error is not None or self._deadline is None:
            return
        delay = self._deadline - monotonic()
        if delay <= 0:
            self._expire()
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._expire)

    def _expire(self) -> None:
        self._timer = None
        self._finish(SearchError.store_timeout())

    def _finish(self, error: SearchError) -> None:
        if self._error is not None:
            return
        self._error = error
        self._done.set()

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        children, self._children = self._children, set()
        for child in children:
            child._finish(error)

        if self._parent is not None:
            self._parent._children.discard(self)

    def __repr__(self) -> str:
        remaining = self.remaining()
        remaining_str = "none" if remaining is None else f"{remaining * 1000:.0f}ms"
        state = self._error.kind.value if self._error is not None else "active"
        return f"Budget(remaining={remaining_str}, state={state})"


def _consume_result(task: asyncio.Future) -> None:
    # 취소된 하위 호출의 예외가 "never retrieved" 경고로 남지 않도록 소비
    if not task.cancelled():
        task.exception()


def with_cancel(parent: Budget) -> tuple[Budget, Release]:
    """부모와 함께 취소되는 자식 예산 (자체 마감 없음)"""
    budget = Budget(parent)
    return budget, budget.cancel


def with_deadline(parent: Budget, deadline: float) -> tuple[Budget, Release]:
    """deadline 또는 부모 종료 중 먼저 오는 시점에 끝나는 자식 예산

    Args:
        parent: 부모 예산
        deadline: 만료 시각 (time.monotonic 기준)
    """
    parent_deadline = parent.deadline
    if parent_deadline is not None and parent_deadline <= deadline:
        return with_cancel(parent)

    budget = Budget(parent, deadline)
    budget._start_timer()
    return budget, budget.cancel


def with_timeout(parent: Budget, seconds: float) -> tuple[Budget, Release]:
    """지금부터 seconds 뒤에 만료되는 자식 예산"""
    return with_deadline(parent, monotonic() + seconds)


def derive_budget(parent: Budget, desired: float) -> tuple[Budget, Release]:
    """부모 예산과 원하는 단계 예산으로 파생 예산 계산

    단계 예산이 넉넉해도 이미 빠듯한 부모 마감을 넘지 않고,
    부모가 넉넉하면 단계별 상한을 적용합니다.

    Args:
        parent: 부모 예산 (요청 전체 예산 등)
        desired: 원하는 단계 예산 (초)

    Returns:
        (파생 예산, release 함수). release는 모든 종료 경로에서 호출해야 합니다.
    """
    parent_deadline = parent.deadline
    if parent_deadline is not None:
        internal_deadline = monotonic() + desired
        # 부모 마감이 더 빠르면 부모가 지배
        if internal_deadline > parent_deadline:
            return with_cancel(parent)
        return with_deadline(parent, internal_deadline)

    return with_timeout(parent, desired)


@contextmanager
def tight_budget(parent: Budget, desired: float) -> Iterator[Budget]:
    """derive_budget + 종료 시 자동 release"""
    budget, release = derive_budget(parent, desired)
    try:
        yield budget
    finally:
        release()

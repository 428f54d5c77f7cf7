# resume_translator/inflight.py
"""本模块提供请求合并：同一指纹的并发远程调用只会真正发起一次。"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class _Pending(Generic[T]):
    __slots__ = ("task", "waiters")

    def __init__(self, task: asyncio.Task[T]):
        self.task = task
        self.waiters = 0


class InFlightRegistry(Generic[T]):
    """
    记录正在进行中的调用。

    条目在任务结束（无论成功或失败）时移除。等待者被取消时，只有当它是
    最后一个等待者，共享任务才会被一并取消。
    """

    def __init__(self) -> None:
        self._pending: dict[str, _Pending[T]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _discard(self, key: str, entry: _Pending[T], _task: asyncio.Task[T]) -> None:
        if self._pending.get(key) is entry:
            del self._pending[key]

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """复用 `key` 对应的进行中调用，或启动 `factory()` 并登记。"""
        entry = self._pending.get(key)
        if entry is None or entry.task.cancelled():

            async def _call() -> T:
                return await factory()

            entry = _Pending(asyncio.create_task(_call()))
            self._pending[key] = entry
            entry.task.add_done_callback(
                lambda task, e=entry: self._discard(key, e, task)
            )
        else:
            logger.debug("合并进行中的请求", key=key[:12])

        entry.waiters += 1
        try:
            return await asyncio.shield(entry.task)
        except asyncio.CancelledError:
            if entry.waiters <= 1 and not entry.task.done():
                entry.task.cancel()
            raise
        finally:
            entry.waiters -= 1

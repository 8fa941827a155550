"""
Bounded asyncio worker pool.

A failure in one task cancels every sibling through ``asyncio.TaskGroup``;
the first failure is re-raised unwrapped from the resulting exception group.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

import structlog

from toonstats.config.config import MAX_WORKERS

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _first_error(group: BaseExceptionGroup) -> BaseException:
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


async def run_all(coros: Iterable[Awaitable[R]]) -> List[R]:
    """Run every awaitable concurrently and return the results in input order."""
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(coro) for coro in coros]
    except BaseExceptionGroup as eg:
        raise _first_error(eg) from None
    return [task.result() for task in tasks]


class WorkerPool:
    """A fixed number of workers draining a shared queue of items."""

    def __init__(self, size: int = MAX_WORKERS):
        if size < 1:
            raise ValueError("size must be >= 1")
        if size > MAX_WORKERS:
            logger.warning("Worker count clamped", requested=size, max_workers=MAX_WORKERS)
            size = MAX_WORKERS
        self.size = size

    async def run(self, items: Iterable[T], handler: Callable[[T], Awaitable[None]]) -> None:
        """Call ``handler`` once per item with at most ``size`` calls in flight."""
        queue: asyncio.Queue[T] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)

        num_workers = min(self.size, queue.qsize())
        if num_workers == 0:
            return

        try:
            async with asyncio.TaskGroup() as tg:
                for i in range(num_workers):
                    tg.create_task(self._worker(f"worker-{i}", queue, handler))
        except BaseExceptionGroup as eg:
            raise _first_error(eg) from None

    async def _worker(self, worker_id: str, queue: asyncio.Queue[T], handler: Callable[[T], Awaitable[None]]) -> None:
        while True:
            try:
                item = queue.get_nowait()
            except asyncio.QueueEmpty:
                logger.debug("Worker finished", worker=worker_id)
                return
            await handler(item)

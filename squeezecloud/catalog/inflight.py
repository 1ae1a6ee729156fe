"""
In-flight request deduplication.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InflightRegistry(Generic[T]):
    """
    Share one pending operation between concurrent callers of the same key.

    The first caller for a key starts the operation; later callers await the
    same task. The entry is dropped as soon as the task settles, whether it
    succeeded or failed, so the next call after that starts fresh.

    Usage:
        registry: InflightRegistry[TrackRecord] = InflightRegistry()
        record = await registry.run(track_id, lambda: client.fetch(track_id))
    """

    def __init__(self) -> None:
        self._tasks: dict[str, "asyncio.Task[T]"] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, key: str) -> bool:
        return key in self._tasks

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``factory`` for ``key`` unless a call for it is already pending.

        Args:
            key: Deduplication key (track ID)
            factory: Zero-argument callable returning the awaitable to run

        Returns:
            Result of the shared operation

        Raises:
            Whatever the shared operation raises, to every waiting caller
        """
        async with self._lock:
            task = self._tasks.get(key)
            if task is None:
                task = asyncio.ensure_future(factory())
                self._tasks[key] = task
                task.add_done_callback(lambda t, k=key: self._discard(k, t))
            else:
                logger.debug(f"Joining in-flight request for {key}")

        # Shield so one cancelled waiter does not cancel the shared call
        return await asyncio.shield(task)

    def _discard(self, key: str, task: "asyncio.Task[T]") -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"In-flight request for {key} failed: {task.exception()}")

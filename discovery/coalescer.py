from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar


log = logging.getLogger(__name__)

T = TypeVar("T")


def _consume_exception(task: asyncio.Task) -> None:
    # every waiter may be gone by the time a shared task fails
    if not task.cancelled() and task.exception() is not None:
        log.debug("Shared request failed: %r", task.exception())


class SingleFlight:
    """
    At most one in-flight task per key; concurrent callers share its outcome.

        flight = SingleFlight()
        html = await flight.run("22.6273,120.3014", lambda: fetcher.fetch(url))

    The key is dropped from the table as soon as the task finishes, whether it
    returned or raised, so the next call after completion starts a fresh task.
    Must be used from a single event loop.
    """

    def __init__(self) -> None:
        self._pending: Dict[str, asyncio.Task] = {}

    async def run(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        task = self._pending.get(key)
        if task is None or task.cancelled():
            task = asyncio.ensure_future(self._run(key, producer))
            task.add_done_callback(_consume_exception)
            self._pending[key] = task
        else:
            log.debug("Joining in-flight request %s", key)
        # a cancelled waiter must not cancel the shared task
        return await asyncio.shield(task)

    async def _run(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await producer()
        finally:
            self._pending.pop(key, None)

    def in_flight(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)

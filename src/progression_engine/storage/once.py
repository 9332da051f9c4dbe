"""Single-flight async initialization."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class AsyncOnce(Generic[T]):
    """Runs an async factory at most once; every caller awaits the same run.

    ``start()`` schedules the factory without waiting for it. ``get()``
    starts it if nobody has, then waits. Callers that arrive while the run
    is in flight share its task instead of starting another, and callers
    after it finishes get the cached value without awaiting anything.
    Cancelling one waiter does not cancel the shared run. If the factory
    raises, every waiter sees the same exception and it is not retried.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._task: asyncio.Task[T] | None = None
        self._value: T | None = None
        self._done = False

    @property
    def started(self) -> bool:
        return self._task is not None or self._done

    @property
    def done(self) -> bool:
        return self._done

    def start(self) -> None:
        """Schedule the factory on the running loop if it has not been scheduled."""
        if self.started:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> T:
        return await self._factory()

    async def get(self) -> T:
        if self._done:
            return self._value  # type: ignore[return-value]
        self.start()
        assert self._task is not None
        value = await asyncio.shield(self._task)
        if not self._done:
            self._value = value
            self._done = True
            self._task = None
        return value

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


class Debouncer:
    """
    Trailing-edge debounce for an async callable.

    Each `call` restarts the quiescent window; only the arguments of the last
    call in a burst reach the wrapped function. Once the window has elapsed
    the invocation is no longer cancellable, so an in-flight call is never
    interrupted by a later one.
    """

    def __init__(self, func: Callable[..., Awaitable[Any]], wait: float) -> None:
        self._func = func
        self.wait = wait
        self._pending: asyncio.Task[None] | None = None
        self._pending_args: tuple[Any, ...] = ()
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, *args: Any) -> None:
        self.cancel()
        self._pending_args = args
        task = asyncio.get_running_loop().create_task(self._fire_later(args))
        self._pending = task
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def flush(self) -> None:
        if self._pending is None:
            return
        args = self._pending_args
        self.cancel()
        await self._func(*args)

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def wait_idle(self) -> None:
        """Wait until the pending call (if any) and running calls complete."""
        while True:
            tasks = [task for task in self._running if not task.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire_later(self, args: tuple[Any, ...]) -> None:
        await asyncio.sleep(self.wait)
        self._pending = None
        await self._func(*args)

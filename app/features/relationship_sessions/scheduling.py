"""Scoped asyncio timers

Every delayed or recurring callback the session engine uses is registered
here under a name. Registering a name again replaces the pending callback,
and closing the scope cancels everything it owns.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]


class TimerScope:
    """Owns named one-shot and repeating timers on the running event loop"""

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_scheduled(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()

    def call_later(self, name: str, delay: float, callback: Callback) -> Optional[asyncio.Task]:
        """Run callback once after delay seconds, replacing any pending timer with this name"""
        if self._closed:
            logger.debug(f"Timer scope closed, not scheduling {name}")
            return None

        self.cancel(name)

        async def _run_once():
            await asyncio.sleep(delay)
            await self._invoke(callback)

        return self._spawn(name, _run_once())

    def every(self, name: str, interval: float, callback: Callback) -> Optional[asyncio.Task]:
        """Run callback every interval seconds until cancelled"""
        if self._closed:
            logger.debug(f"Timer scope closed, not scheduling {name}")
            return None

        self.cancel(name)

        async def _run_forever():
            me = asyncio.current_task()
            while self._tasks.get(name) is me:
                await asyncio.sleep(interval)
                await self._invoke(callback)

        return self._spawn(name, _run_forever())

    def cancel(self, name: str) -> bool:
        """Cancel a pending timer. Returns True if one was pending."""
        task = self._tasks.pop(name, None)
        if task is None or task.done():
            return False

        # A callback cancelling its own timer must not cancel itself mid-run;
        # repeating timers notice they were unregistered and stop.
        if task is not asyncio.current_task():
            task.cancel()
        return True

    def close(self):
        """Cancel every pending timer and refuse new ones"""
        self._closed = True
        for name in list(self._tasks):
            self.cancel(name)

    def _spawn(self, name: str, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=f"session-timer:{name}")
        self._tasks[name] = task
        task.add_done_callback(lambda t, n=name: self._on_done(n, t))
        return task

    def _on_done(self, name: str, task: asyncio.Task):
        if self._tasks.get(name) is task:
            del self._tasks[name]

        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            logger.error(f"Session timer {name} failed: {exc}", exc_info=exc)

    async def _invoke(self, callback: Callback):
        result = callback()
        if asyncio.iscoroutine(result):
            await result

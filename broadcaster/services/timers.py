"""
Cancellable scheduled tasks.

Each ScheduledTask is a single slot: starting it again cancels whatever the
slot was running, so only the latest timer of a kind can ever fire.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[Any]]]


class ScheduledTask:
    """A named, replaceable asyncio timer (one-shot or repeating)."""

    def __init__(self, name: str):
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start_once(self, delay: float, callback: Callback) -> None:
        """Run `callback` once after `delay` seconds."""
        self.cancel()
        self._task = asyncio.create_task(self._run_once(delay, callback), name=self.name)

    def start_repeating(self, interval: float, callback: Callback, immediate: bool = False) -> None:
        """Run `callback` every `interval` seconds until cancelled."""
        self.cancel()
        self._task = asyncio.create_task(
            self._run_repeating(interval, callback, immediate), name=self.name
        )

    def cancel(self) -> None:
        """Cancel the running timer. Safe to call when nothing is scheduled."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    async def wait(self) -> None:
        """Wait for a one-shot timer to finish (used by shutdown and tests)."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _invoke(self, callback: Callback) -> None:
        result = callback()
        if inspect.isawaitable(result):
            await result

    async def _run_once(self, delay: float, callback: Callback) -> None:
        await asyncio.sleep(delay)
        # Detach before invoking so the callback may restart this slot
        if self._task is asyncio.current_task():
            self._task = None
        await self._invoke(callback)

    async def _run_repeating(self, interval: float, callback: Callback, immediate: bool) -> None:
        if not immediate:
            await asyncio.sleep(interval)
        while True:
            try:
                await self._invoke(callback)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Timer {self.name} callback failed: {e}", exc_info=True)
            await asyncio.sleep(interval)

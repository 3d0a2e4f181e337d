"""
Cancellable scheduled task used to debounce seed input.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Runs an async callback once the input has been quiet for `delay_ms`.

    Scheduling again before the delay elapses cancels the pending call, so only
    the last scheduled callback within a quiet window ever runs. A callback that
    has already started is never cancelled.
    """

    def __init__(self, delay_ms: int = 500, name: str = "debounce"):
        self.delay = delay_ms / 1000
        self.name = name
        self._task: Optional[asyncio.Task] = None
        # Callbacks past their delay, kept referenced until they finish
        self._fired: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a scheduled callback has not started yet."""
        return self._task is not None and not self._task.done()

    def schedule(self, callback: Callable[[], Awaitable[None]]) -> asyncio.Task:
        """
        Schedule `callback`, superseding any pending one.

        Must be called from a running event loop.
        """
        self.cancel()
        self._task = asyncio.create_task(self._fire(callback), name=self.name)
        return self._task

    def cancel(self):
        """Drop the pending callback, if any."""
        if self.pending:
            logger.debug(f"[{self.name}] Superseding pending call")
            self._task.cancel()
        self._task = None

    async def wait(self):
        """Wait for the pending callback and any running ones to finish."""
        tasks = [t for t in [self._task, *self._fired] if t is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire(self, callback: Callable[[], Awaitable[None]]):
        await asyncio.sleep(self.delay)

        current = asyncio.current_task()
        if self._task is current:
            self._task = None
        self._fired.add(current)
        current.add_done_callback(self._fired.discard)

        await callback()

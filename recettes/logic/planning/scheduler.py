"""Debounced task scheduling for coalescing bursts of plan writes."""
from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class DebouncedTask:
    """Runs ``callback`` once, ``delay`` seconds after the last ``schedule()`` call.

    Each schedule() cancels the pending (still sleeping) run and starts a new
    one, so at most one run is pending at a time. A run whose delay already
    elapsed is dispatched and is not cancelled by later calls.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]):
        self.delay = delay
        self._callback = callback
        self._pending: Optional[asyncio.Task] = None
        self._inflight: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self):
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> bool:
        '''Cancels the pending run. Returns True if one was pending.'''
        if not self.pending:
            self._pending = None
            return False
        self._pending.cancel()
        self._pending = None
        return True

    async def _run(self):
        await asyncio.sleep(self.delay)
        # From here on the run counts as dispatched
        task = asyncio.current_task()
        if self._pending is task:
            self._pending = None
        self._inflight.add(task)
        try:
            await self._callback()
        finally:
            self._inflight.discard(task)

    async def flush(self):
        '''Runs a pending callback right away and waits for dispatched runs.'''
        if self.cancel():
            await self._callback()
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

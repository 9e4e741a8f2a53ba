"""Background task that periodically evicts idle ingredient sessions."""

import asyncio
from typing import Optional

from src.sessions.store import IngredientSessionStore
from src.utils.config import config
from src.utils.logger import logger
from src.utils.safe_execute import safe_execute_async


class SessionSweeper:
    """Runs IngredientSessionStore.sweep() every `interval_seconds` on the event loop.

    A failed sweep is logged and retried on the next tick; the loop only ends
    when stop() is called.
    """

    def __init__(self, store: IngredientSessionStore, interval_seconds: Optional[float] = None) -> None:
        self.store = store
        self.interval_seconds = interval_seconds or config.SESSION_SWEEP_INTERVAL_MINUTES * 60
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            await safe_execute_async(self.store.sweep(), "Session sweep", log_level="error", default_return=0)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="session-sweeper")
        logger.info(f"Session sweeper started (every {self.interval_seconds:.0f}s, TTL {self.store.ttl})")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")

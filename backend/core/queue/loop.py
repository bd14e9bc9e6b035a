"""
Periodic polling loop base.

The dispatcher, worker, stuck-file sweeper and mirror drainer each run
tick() on a fixed interval as an independent asyncio task. A failing tick
is logged and the loop keeps going.

Dependencies: asyncio (stdlib)
System role: Background task lifecycle for queue components
"""

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class PollingLoop(ABC):
    """Run tick() every `interval_seconds` until stopped."""

    name: str = "loop"

    def __init__(self, interval_seconds: float) -> None:
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @abstractmethod
    async def tick(self) -> int:
        """Do one unit of work; return how many items were handled."""

    async def run_forever(self) -> None:
        """Tick on a fixed interval until cancelled."""
        logger.info(
            f"{self.name} started",
            extra={"component": self.name, "interval_seconds": self.interval_seconds},
        )
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                logger.info(f"{self.name} cancelled", extra={"component": self.name})
                raise
            except Exception as e:
                logger.error(
                    f"{self.name} tick failed: {e}",
                    extra={"component": self.name, "error": str(e)},
                    exc_info=True,
                )
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        """Schedule run_forever() on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name=self.name)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info(f"{self.name} stopped", extra={"component": self.name})

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

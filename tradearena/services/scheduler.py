"""Cancellable periodic task on the asyncio event loop."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]


class PeriodicTask:
    """
    Runs ``callback`` every ``interval`` seconds until stopped.

    The first run happens one interval after ``start()``. A failing run
    is logged and the schedule continues.
    """

    def __init__(self, interval: float, callback: Callback, name: str = "periodic"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the task on the running loop. Starting twice is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=self.name)
        logger.info(f"Started {self.name} every {self.interval}s")

    async def stop(self) -> None:
        """Cancel the task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Stopped {self.name}")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                result = self.callback()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(f"{self.name} run failed")

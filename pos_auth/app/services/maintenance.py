"""
Periodic maintenance jobs run for the lifetime of the app.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[None]]


class MaintenanceScheduler:
    def __init__(self):
        self._jobs: List[tuple] = []
        self._tasks: List[asyncio.Task] = []

    def add_job(self, name: str, interval_seconds: float, job: Job) -> None:
        self._jobs.append((name, interval_seconds, job))

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def _run_forever(self, name: str, interval_seconds: float, job: Job):
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await job()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Maintenance job {name} failed: {e}", exc_info=True)

    def start(self) -> None:
        if self._tasks:
            return
        for name, interval_seconds, job in self._jobs:
            task = asyncio.create_task(
                self._run_forever(name, interval_seconds, job), name=name
            )
            self._tasks.append(task)
        logger.info(f"Started {len(self._tasks)} maintenance job(s)")

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

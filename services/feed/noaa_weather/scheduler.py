"""Repeating timers on the asyncio event loop."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Set

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_DELAY = 5.0


@dataclass
class Job:
    """A coroutine function run every `interval` seconds."""
    name: str
    interval: float
    func: Callable[[], Awaitable[None]]


class Scheduler:
    """Runs each job on its own timer after a shared startup delay.

    Every tick starts the job as a separate task, so a slow cycle never
    holds back its timer; overlapping cycles of the same job are allowed.
    """

    def __init__(self, initial_delay: float = DEFAULT_INITIAL_DELAY):
        self.initial_delay = initial_delay
        self.jobs: List[Job] = []
        self._timers: List[asyncio.Task] = []
        self._inflight: Set[asyncio.Task] = set()

    def add_job(self, name: str, interval: float, func: Callable[[], Awaitable[None]]) -> Job:
        if interval <= 0:
            raise ValueError(f"Interval for {name} must be positive, got {interval}")
        job = Job(name=name, interval=interval, func=func)
        self.jobs.append(job)
        return job

    @property
    def running(self) -> bool:
        return bool(self._timers)

    def start(self) -> None:
        """Start all timers. Must be called from a running event loop."""
        if self.running:
            raise RuntimeError("Scheduler already started")
        for job in self.jobs:
            logger.info(f"Scheduling {job.name} every {job.interval}s after {self.initial_delay}s")
            self._timers.append(asyncio.create_task(self._repeat(job), name=f"timer-{job.name}"))

    def stop(self) -> None:
        """Cancel all timers. Cycles already in flight are left to finish."""
        for timer in self._timers:
            timer.cancel()
        self._timers = []

    async def _repeat(self, job: Job) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            self._spawn(job)
            await asyncio.sleep(job.interval)

    def _spawn(self, job: Job) -> None:
        logger.debug(f"Running {job.name}")
        task = asyncio.create_task(job.func(), name=f"cycle-{job.name}")
        self._inflight.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"{task.get_name()} failed: {error}")

    async def run_once(self) -> None:
        """Run every job a single time, concurrently, and wait for them."""
        await asyncio.gather(*(job.func() for job in self.jobs))

"""Check scheduler — probes every registered endpoint on a fixed tick.

One asyncio task drives the tick; probes run on a bounded thread pool so a
slow endpoint never blocks the event loop. Registration-triggered checks go
through the same pool.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from .checker import CheckCoordinator
from .models import StatusRecord
from .store import MonitorStore

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30


class MonitorScheduler:
    """Schedules coordinated checks for all registered endpoints.

    Lifecycle:
        scheduler = MonitorScheduler(store, coordinator)
        await scheduler.start()
        ...
        await scheduler.stop()

    A pass that overruns the interval is followed immediately by the next
    one; missed ticks coalesce rather than queue.
    """

    def __init__(
        self,
        store: MonitorStore,
        coordinator: CheckCoordinator,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        max_workers: int = 4,
    ) -> None:
        self.store = store
        self.coordinator = coordinator
        self.interval = interval
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="probe")
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._pending: set[str] = set()
        self._pending_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the tick loop. The first pass runs right away."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._tick_loop(), name="monitor-scheduler")
        logger.info("Monitor scheduler started (interval=%ss)", self.interval)

    async def stop(self) -> None:
        """Stop the tick loop. In-flight probes finish on their own."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Monitor scheduler stopped")

    async def run_all_now(self) -> list[StatusRecord | None]:
        """Run one full pass over a snapshot of the registry."""
        endpoints = self.store.snapshot()
        if not endpoints:
            return []

        loop = asyncio.get_running_loop()
        results = await asyncio.gather(*(
            loop.run_in_executor(self._executor, self.coordinator.run_check, ep)
            for ep in endpoints
        ))
        logger.debug(
            "Pass complete: %d/%d endpoints up",
            sum(1 for r in results if r is not None and r.is_up), len(endpoints),
        )
        return list(results)

    def check_now(self, name: str) -> Future[StatusRecord | None] | None:
        """Queue an out-of-band check for ``name`` without blocking.

        Returns None when a check for that name is already queued, or when
        the scheduler has been stopped.
        """
        with self._pending_lock:
            if name in self._pending:
                return None
            self._pending.add(name)
        try:
            return self._executor.submit(self._run_immediate, name)
        except RuntimeError:
            with self._pending_lock:
                self._pending.discard(name)
            logger.debug("Scheduler stopped, skipping immediate check for '%s'", name)
            return None

    def _run_immediate(self, name: str) -> StatusRecord | None:
        with self._pending_lock:
            self._pending.discard(name)
        # Read the endpoint now so a re-registration while queued probes the new URL.
        endpoint = self.store.get_endpoint(name)
        if endpoint is None:
            return None
        return self.coordinator.run_check(endpoint)

    async def _tick_loop(self) -> None:
        loop = asyncio.get_running_loop()
        while self._running:
            started = loop.time()
            try:
                await self.run_all_now()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Scheduler pass failed")

            delay = max(0.0, self.interval - (loop.time() - started))
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                break

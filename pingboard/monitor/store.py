"""In-memory endpoint registry + status store behind one reader/writer lock.

The registry (name -> Endpoint) and the status map (name -> EndpointStatus)
always hold the same keys. Readers get detached copies; the only mutation
paths are ``register`` and ``apply_check_result``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from .models import DowntimeRecord, Endpoint, EndpointStatus, Status, StatusRecord, utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = timedelta(hours=10)
DEFAULT_MAX_RECENT_DOWNTIME = 5


class RWLock:
    """Writer-preferring reader/writer lock.

    Any number of readers may hold it together; a writer holds it alone.
    Waiting writers block new readers so a steady read load cannot starve
    check results. Not reentrant.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MonitorStore:
    """Owned registry + status store shared by the scheduler and the API."""

    def __init__(
        self,
        history_window: timedelta = DEFAULT_HISTORY_WINDOW,
        max_recent_downtime: int = DEFAULT_MAX_RECENT_DOWNTIME,
        close_downtime_on_recovery: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.history_window = history_window
        self.max_recent_downtime = max_recent_downtime
        self.close_downtime_on_recovery = close_downtime_on_recovery
        self._clock = clock
        self._lock = RWLock()
        self._endpoints: dict[str, Endpoint] = {}
        self._statuses: dict[str, EndpointStatus] = {}

    # ── Registry ─────────────────────────────────────────────────────────

    def register(self, endpoint: Endpoint) -> EndpointStatus:
        """Insert or overwrite an endpoint and reset its status to Pending."""
        status = EndpointStatus(name=endpoint.name, url=endpoint.url, last_checked=self._clock())
        with self._lock.write():
            replaced = self._endpoints.get(endpoint.name)
            self._endpoints[endpoint.name] = endpoint
            self._statuses[endpoint.name] = status
            snapshot = status.copy()

        if replaced is not None:
            logger.info("Re-registered endpoint '%s': %s -> %s", endpoint.name, replaced.url, endpoint.url)
        else:
            logger.info("Registered endpoint '%s' (%s)", endpoint.name, endpoint.url)
        return snapshot

    def get_endpoint(self, name: str) -> Endpoint | None:
        with self._lock.read():
            return self._endpoints.get(name)

    def snapshot(self) -> list[Endpoint]:
        """Point-in-time list of registered endpoints, in registration order."""
        with self._lock.read():
            return list(self._endpoints.values())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._endpoints)

    # ── Status ───────────────────────────────────────────────────────────

    def snapshot_all(self) -> dict[str, EndpointStatus]:
        """Deep copy of every endpoint status."""
        with self._lock.read():
            return {name: s.copy() for name, s in self._statuses.items()}

    def get_status(self, name: str) -> EndpointStatus | None:
        with self._lock.read():
            status = self._statuses.get(name)
            return status.copy() if status else None

    def apply_check_result(
        self,
        endpoint: Endpoint,
        record: StatusRecord,
        downtime: DowntimeRecord | None = None,
    ) -> bool:
        """Fold one probe outcome into the endpoint's status.

        Returns False (and changes nothing) when the endpoint is no longer
        registered, or is now registered under a different URL.
        """
        with self._lock.write():
            status = self._statuses.get(endpoint.name)
            current = self._endpoints.get(endpoint.name)
            if status is None or current is None or current.url != endpoint.url:
                logger.debug("Dropping stale check result for '%s'", endpoint.name)
                return False

            now = self._clock()
            previous = status.current_status

            status.last_checked = record.timestamp
            status.current_status = Status.from_up(record.is_up)
            status.history.append(record)

            last = status.recent_downtime[-1] if status.recent_downtime else None
            if downtime is not None:
                if last is not None and last.ongoing:
                    last.close(now)
                status.recent_downtime.append(downtime)
                if len(status.recent_downtime) > self.max_recent_downtime:
                    del status.recent_downtime[: -self.max_recent_downtime]
            elif self.close_downtime_on_recovery and record.is_up and last is not None and last.ongoing:
                last.close(now)

            cutoff = now - self.history_window
            status.history = [r for r in status.history if r.timestamp >= cutoff]

        if previous == Status.UP and not record.is_up:
            logger.warning("Endpoint '%s' is DOWN: %s", endpoint.name, downtime.reason if downtime else "unknown")
        elif previous == Status.DOWN and record.is_up:
            logger.info("Endpoint '%s' recovered", endpoint.name)
        return True

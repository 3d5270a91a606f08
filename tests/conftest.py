"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest

from pingboard.monitor.checker import CheckCoordinator
from pingboard.monitor.models import Endpoint, StatusRecord, utcnow
from pingboard.monitor.scheduler import MonitorScheduler
from pingboard.monitor.store import MonitorStore

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for the store."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeProber:
    """Returns scripted outcomes per URL; defaults to HTTP 200."""

    def __init__(self) -> None:
        self.calls: list[Endpoint] = []
        self.call_times: list[float] = []  # time.monotonic() of each call
        self._scripts: dict[str, list[StatusRecord | Exception]] = {}
        self._lock = threading.Lock()
        self.gate: threading.Event | None = None  # when set, probes block until it fires

    def script(self, url: str, *outcomes: StatusRecord | Exception) -> None:
        self._scripts.setdefault(url, []).extend(outcomes)

    def probe(self, endpoint: Endpoint) -> StatusRecord:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.calls.append(endpoint)
            self.call_times.append(time.monotonic())
            queue = self._scripts.get(endpoint.url)
            outcome = queue.pop(0) if queue else None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome or up_record(utcnow())


def up_record(ts: datetime, status_code: int = 200, latency: float = 0.05) -> StatusRecord:
    return StatusRecord(timestamp=ts, is_up=True, response_time=latency, status_code=status_code)


def http_down_record(ts: datetime, status_code: int = 503, latency: float = 0.05) -> StatusRecord:
    return StatusRecord(timestamp=ts, is_up=False, response_time=latency, status_code=status_code)


def error_record(ts: datetime, error: str = "dial tcp: lookup example.invalid: no such host") -> StatusRecord:
    return StatusRecord(timestamp=ts, is_up=False, response_time=0.01, error=error)


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MonitorStore:
    return MonitorStore(clock=clock)


@pytest.fixture
def prober() -> FakeProber:
    return FakeProber()


@pytest.fixture
def live_store() -> MonitorStore:
    """Store on the real clock, for tests that go through the scheduler."""
    return MonitorStore()


@pytest.fixture
def scheduler(live_store: MonitorStore, prober: FakeProber) -> Generator[MonitorScheduler, None, None]:
    sched = MonitorScheduler(
        live_store, CheckCoordinator(live_store, prober), interval=60, max_workers=2,
    )
    yield sched
    if prober.gate is not None:
        prober.gate.set()
    asyncio.run(sched.stop())

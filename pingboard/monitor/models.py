"""Data models for monitored endpoints and their check outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

ONGOING = "ongoing"


class Status(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    PENDING = "Pending"

    @classmethod
    def from_up(cls, is_up: bool) -> "Status":
        return cls.UP if is_up else cls.DOWN


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Endpoint:
    """A named target URL."""

    name: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "url": self.url}


@dataclass(frozen=True)
class StatusRecord:
    """Outcome of a single probe."""

    timestamp: datetime
    is_up: bool
    response_time: float  # seconds
    status_code: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "isUp": self.is_up,
            "responseTime": self.response_time,
        }
        if self.status_code is not None:
            d["statusCode"] = self.status_code
        if self.error:
            d["error"] = self.error
        return d


@dataclass
class DowntimeRecord:
    """One downtime incident. ``duration`` stays ``"ongoing"`` until closed."""

    timestamp: datetime
    reason: str
    duration: str = ONGOING

    @property
    def ongoing(self) -> bool:
        return self.duration == ONGOING

    def close(self, now: datetime) -> None:
        self.duration = format_duration(now - self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration,
            "reason": self.reason,
        }


@dataclass
class EndpointStatus:
    """Aggregate state of one endpoint. Owned and mutated by MonitorStore."""

    name: str
    url: str
    current_status: Status = Status.PENDING
    last_checked: datetime = field(default_factory=utcnow)
    history: list[StatusRecord] = field(default_factory=list)
    recent_downtime: list[DowntimeRecord] = field(default_factory=list)

    def copy(self) -> "EndpointStatus":
        """Detached copy safe to hand out after the lock is released."""
        return replace(
            self,
            history=list(self.history),
            recent_downtime=[replace(d) for d in self.recent_downtime],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "currentStatus": self.current_status.value,
            "lastChecked": self.last_checked.isoformat(),
            "history": [r.to_dict() for r in self.history],
            "recentDowntime": [d.to_dict() for d in self.recent_downtime],
        }


def format_duration(delta: timedelta) -> str:
    """Render an elapsed time rounded to the second, e.g. ``1h2m3s``, ``2m0s``, ``45s``."""
    total = max(0, int(delta.total_seconds() + 0.5))
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"


def down_reason(record: StatusRecord) -> str:
    if record.error:
        return record.error
    return f"HTTP Status {record.status_code}"

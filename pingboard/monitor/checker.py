"""Check coordinator — probe one endpoint and fold the outcome into the store."""

from __future__ import annotations

import logging

from .models import DowntimeRecord, Endpoint, StatusRecord, down_reason
from .prober import Prober
from .store import MonitorStore

logger = logging.getLogger(__name__)


def downtime_for(record: StatusRecord) -> DowntimeRecord | None:
    """Open an ongoing incident for a failed probe, None for a passing one."""
    if record.is_up:
        return None
    return DowntimeRecord(timestamp=record.timestamp, reason=down_reason(record))


class CheckCoordinator:
    """Runs probe + apply as one unit of work per endpoint."""

    def __init__(self, store: MonitorStore, prober: Prober) -> None:
        self.store = store
        self.prober = prober

    def apply(self, endpoint: Endpoint, record: StatusRecord) -> bool:
        return self.store.apply_check_result(endpoint, record, downtime_for(record))

    def run_check(self, endpoint: Endpoint) -> StatusRecord | None:
        """Check one endpoint. Never raises; returns None on an unexpected error."""
        try:
            record = self.prober.probe(endpoint)
            self.apply(endpoint, record)
        except Exception:
            logger.exception("Check failed for '%s' (%s)", endpoint.name, endpoint.url)
            return None

        logger.debug(
            "Check %s: %s (%.0fms)%s",
            endpoint.name,
            "UP" if record.is_up else "DOWN",
            record.response_time * 1000,
            f" {record.status_code}" if record.status_code is not None else "",
        )
        return record

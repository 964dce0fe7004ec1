"""Trailing-window retrieval of telemetry events."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from datastore.event_store import EventStore
from models.records import TelemetryEvent, utc_now
from services.aggregator import InsightsAggregator, InsightsSummary
from services.errors import storage_errors
from services.registry import Registry

logger = logging.getLogger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def resolve_window_hours(hours: Optional[int], default: int = 24) -> int:
    """Return ``hours`` when positive, otherwise the default window."""
    if hours is None or hours <= 0:
        return default
    return hours


class WindowQueryEngine:
    """Serves ``[now - hours, now]`` windows, recomputed on every call.

    There is no cap on ``hours`` or on the number of events returned.
    """

    def __init__(
        self,
        store: EventStore,
        registry: Registry,
        aggregator: InsightsAggregator,
        default_window_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.registry = registry
        self.aggregator = aggregator
        self.default_window_hours = default_window_hours
        self._clock = clock

    def window_bounds(self, window_hours: int) -> tuple[datetime, datetime]:
        now = self._clock()
        try:
            since = now - timedelta(hours=window_hours)
        except OverflowError:
            # window reaches past the earliest representable instant
            since = _EARLIEST
        return since, now

    def query(
        self,
        customer_id: str,
        device_id: str,
        hours: Optional[int] = None,
    ) -> list[TelemetryEvent]:
        """Events in the window, ascending by ``recorded_at``."""
        self.registry.require_device(customer_id, device_id)
        window_hours = resolve_window_hours(hours, self.default_window_hours)
        since, until = self.window_bounds(window_hours)
        with storage_errors("retrieve telemetry"):
            events = self.store.range_events(customer_id, device_id, since, until)
        logger.debug(
            "Window query served",
            extra={
                "customer_id": customer_id,
                "device_id": device_id,
                "window_hours": window_hours,
                "event_count": len(events),
            },
        )
        return events

    def insights(
        self,
        customer_id: str,
        device_id: str,
        hours: Optional[int] = None,
    ) -> InsightsSummary:
        self.registry.require_device(customer_id, device_id)
        since, until = self.window_bounds(
            resolve_window_hours(hours, self.default_window_hours)
        )
        with storage_errors("calculate insights"):
            newest_first = self.store.range_events(
                customer_id, device_id, since, until, descending=True
            )
        return self.aggregator.aggregate(newest_first)

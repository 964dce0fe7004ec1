"""Aggregation logic for telemetry windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from models.records import TelemetryEvent


@dataclass
class InsightsSummary:
    """Computed statistics for the events of one window."""

    count: int = 0
    unit: str = "C"
    latest: float | None = None
    min_value: float | None = None
    max_value: float | None = None
    average: float | None = None


class InsightsAggregator:
    """Pure aggregation component that can be unit tested in isolation.

    ``aggregate`` expects events newest first, so the first event it sees is
    the latest one; it walks the iterable exactly once. Units are not
    compared: the latest event's unit labels every statistic.
    """

    def __init__(self, default_unit: str = "C") -> None:
        self.default_unit = default_unit

    def aggregate(self, events: Iterable[TelemetryEvent]) -> InsightsSummary:
        summary = InsightsSummary(unit=self.default_unit)
        mean = 0.0

        for event in events:
            value = event.value
            if summary.count == 0:
                summary.latest = value
                summary.unit = event.unit
            summary.count += 1
            # running mean; a plain sum overflows for readings near float max
            mean = mean - mean / summary.count + value / summary.count

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

        if summary.count:
            summary.average = mean

        return summary

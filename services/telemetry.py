"""Service facade wiring the registry, dedup gate and window engine."""

from __future__ import annotations

import math
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional

from datastore.event_store import EventStore, build_default_store
from models.records import Customer, Device, EventDraft, TelemetryEvent, utc_now
from services.aggregator import InsightsAggregator, InsightsSummary
from services.dedup import DedupGate, SubmissionOutcome
from services.errors import ValidationError
from services.registry import Registry
from services.window_query import WindowQueryEngine
from settings import get_settings

_REQUIRED_FIELDS = ("customer_id", "device_id", "event_id", "type", "unit")


class TelemetryService:
    """Boundary operations consumed by the HTTP layer."""

    def __init__(
        self,
        store: EventStore,
        default_unit: str = "C",
        default_window_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.registry = Registry(store)
        self.gate = DedupGate(store, self.registry)
        self.engine = WindowQueryEngine(
            store,
            self.registry,
            InsightsAggregator(default_unit=default_unit),
            default_window_hours=default_window_hours,
            clock=clock,
        )

    def list_customers(self) -> list[Customer]:
        return self.registry.list_customers()

    def list_devices(self, customer_id: str) -> list[Device]:
        return self.registry.list_devices(customer_id)

    def get_device(self, customer_id: str, device_id: str) -> Device:
        return self.registry.get_device(customer_id, device_id)

    def submit_event(self, draft: EventDraft) -> SubmissionOutcome:
        """Validate and accept a submission, reporting whether it was a repeat."""
        self._validate(draft)
        return self.gate.submit(draft)

    def query_telemetry(
        self, customer_id: str, device_id: str, hours: Optional[int] = None
    ) -> list[TelemetryEvent]:
        return self.engine.query(customer_id, device_id, hours)

    def get_insights(
        self, customer_id: str, device_id: str, hours: Optional[int] = None
    ) -> InsightsSummary:
        return self.engine.insights(customer_id, device_id, hours)

    @staticmethod
    def _validate(draft: EventDraft) -> None:
        for name in _REQUIRED_FIELDS:
            value = getattr(draft, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{_camel(name)} is required")
        if not math.isfinite(draft.value):
            raise ValidationError("value must be a finite number")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@lru_cache
def build_default_service() -> TelemetryService:
    """Factory that wires the service with the default store and settings."""
    settings = get_settings()
    return TelemetryService(
        store=build_default_store(),
        default_unit=settings.default_unit,
        default_window_hours=settings.default_window_hours,
    )

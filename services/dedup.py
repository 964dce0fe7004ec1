"""Idempotent acceptance of telemetry events keyed by ``event_id``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from datastore.event_store import DuplicateEventError, EventStore
from models.records import EventDraft, TelemetryEvent
from services.errors import storage_errors
from services.registry import Registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionOutcome:
    event_id: str
    is_duplicate: bool
    event: Optional[TelemetryEvent] = None


class DedupGate:
    """Accepts each ``event_id`` at most once.

    The decision relies on the store's uniqueness constraint rather than a
    separate lookup, so two racing submissions of the same id resolve to one
    stored row and one duplicate outcome. The first writer wins; later
    payloads are discarded without being compared to the stored row.
    """

    def __init__(self, store: EventStore, registry: Registry) -> None:
        self.store = store
        self.registry = registry

    def submit(self, draft: EventDraft) -> SubmissionOutcome:
        self.registry.require_device(draft.customer_id, draft.device_id)

        try:
            with storage_errors("store the telemetry event"):
                event = self.store.insert_event(draft)
        except DuplicateEventError:
            logger.info(
                "Duplicate event received, ignoring",
                extra={
                    "customer_id": draft.customer_id,
                    "device_id": draft.device_id,
                    "event_id": draft.event_id,
                    "is_duplicate": True,
                },
            )
            return SubmissionOutcome(event_id=draft.event_id, is_duplicate=True)

        logger.info(
            "Telemetry event accepted",
            extra={
                "customer_id": draft.customer_id,
                "device_id": draft.device_id,
                "event_id": draft.event_id,
                "is_duplicate": False,
            },
        )
        return SubmissionOutcome(event_id=event.event_id, is_duplicate=False, event=event)

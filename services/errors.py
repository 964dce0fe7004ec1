"""Error taxonomy surfaced by the telemetry services."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from datastore.event_store import IntegrityViolationError, StoreUnavailableError

logger = logging.getLogger(__name__)


class TelemetryError(Exception):
    """Base error carrying a stable machine-readable ``kind``."""

    kind = "error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TelemetryError):
    kind = "validation_error"


class NotFoundError(TelemetryError):
    kind = "not_found"


class StorageUnavailableError(TelemetryError):
    """Transient storage failure; the caller may retry."""

    kind = "storage_unavailable"
    retryable = True


class StorageFailureError(TelemetryError):
    kind = "storage_failure"


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate store exceptions raised inside the block into service errors."""
    try:
        yield
    except StoreUnavailableError as exc:
        logger.error(
            "Storage unavailable during %s",
            operation,
            extra={"kind": StorageUnavailableError.kind, "reason": str(exc)},
        )
        raise StorageUnavailableError(
            f"Storage is temporarily unavailable while attempting to {operation}."
        ) from exc
    except IntegrityViolationError as exc:
        logger.error(
            "Unexpected constraint violation during %s",
            operation,
            extra={"kind": StorageFailureError.kind, "reason": str(exc)},
        )
        raise StorageFailureError(
            f"An unexpected storage error occurred while attempting to {operation}."
        ) from exc

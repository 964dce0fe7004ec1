"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.records import EventDraft, ensure_utc


class ApiModel(BaseModel):
    """Base schema exchanging camelCase JSON with clients."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CustomerOut(ApiModel):
    customer_id: str
    name: str


class DeviceOut(ApiModel):
    customer_id: str
    device_id: str
    label: str
    location: str


class TelemetryEventIn(ApiModel):
    """Telemetry submission from a device."""

    model_config = ConfigDict(str_strip_whitespace=True)

    customer_id: str = Field(..., min_length=1)
    device_id: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1, description="Caller-assigned dedup key.")
    recorded_at: datetime = Field(..., description="Timestamp set by the device.")
    type: str = Field(..., min_length=1)
    value: float = Field(..., allow_inf_nan=False)
    unit: str = Field(..., min_length=1)

    def to_draft(self) -> EventDraft:
        return EventDraft(
            customer_id=self.customer_id,
            device_id=self.device_id,
            event_id=self.event_id,
            recorded_at=ensure_utc(self.recorded_at),
            type=self.type,
            value=self.value,
            unit=self.unit,
        )


class SubmissionResponse(ApiModel):
    message: str
    event_id: str
    is_duplicate: bool


class TelemetryEventOut(ApiModel):
    event_id: str
    recorded_at: datetime
    received_at: datetime
    type: str
    value: float
    unit: str


class InsightsOut(ApiModel):
    """Window statistics; numeric fields are null when the window is empty."""

    latest: Optional[float] = None
    min_value: Optional[float] = Field(default=None, alias="min")
    average: Optional[float] = None
    max_value: Optional[float] = Field(default=None, alias="max")
    count: int = Field(..., ge=0)
    unit: str


class ErrorResponse(BaseModel):
    kind: str
    message: str
    retryable: bool = False


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime

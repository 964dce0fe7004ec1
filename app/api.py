"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas import (
    CustomerOut,
    DeviceOut,
    HealthResponse,
    InsightsOut,
    SubmissionResponse,
    TelemetryEventIn,
    TelemetryEventOut,
)
from services.telemetry import TelemetryService, build_default_service

router = APIRouter(prefix="/api")
health_router = APIRouter()


def get_service() -> TelemetryService:
    return build_default_service()


@router.get(
    "/customers",
    response_model=list[CustomerOut],
    summary="List all customers (tenant selection).",
)
async def list_customers(
    service: TelemetryService = Depends(get_service),
) -> list[CustomerOut]:
    return [CustomerOut.model_validate(customer) for customer in service.list_customers()]


@router.get(
    "/devices/{customer_id}",
    response_model=list[DeviceOut],
    summary="List the devices owned by a customer.",
)
async def list_devices(
    customer_id: str,
    service: TelemetryService = Depends(get_service),
) -> list[DeviceOut]:
    return [DeviceOut.model_validate(device) for device in service.list_devices(customer_id)]


@router.get(
    "/devices/{customer_id}/{device_id}",
    response_model=DeviceOut,
    summary="Fetch a single device scoped to its customer.",
)
async def get_device(
    customer_id: str,
    device_id: str,
    service: TelemetryService = Depends(get_service),
) -> DeviceOut:
    return DeviceOut.model_validate(service.get_device(customer_id, device_id))


@router.post(
    "/telemetry",
    response_model=SubmissionResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit a telemetry event; repeated event ids are acknowledged as duplicates.",
)
async def submit_telemetry(
    payload: TelemetryEventIn,
    service: TelemetryService = Depends(get_service),
) -> SubmissionResponse:
    outcome = service.submit_event(payload.to_draft())
    message = "Event already processed" if outcome.is_duplicate else "Event processed successfully"
    return SubmissionResponse(
        message=message,
        event_id=outcome.event_id,
        is_duplicate=outcome.is_duplicate,
    )


@router.get(
    "/telemetry/{customer_id}/{device_id}",
    response_model=list[TelemetryEventOut],
    summary="Telemetry events in the trailing window, oldest first.",
)
async def get_telemetry(
    customer_id: str,
    device_id: str,
    hours: Optional[int] = Query(
        None, description="Window size in hours; missing or non-positive means 24."
    ),
    service: TelemetryService = Depends(get_service),
) -> list[TelemetryEventOut]:
    events = service.query_telemetry(customer_id, device_id, hours)
    return [TelemetryEventOut.model_validate(event) for event in events]


@router.get(
    "/telemetry/{customer_id}/{device_id}/insights",
    response_model=InsightsOut,
    summary="Latest, min, average and max over the trailing window.",
)
async def get_insights(
    customer_id: str,
    device_id: str,
    hours: Optional[int] = Query(
        None, description="Window size in hours; missing or non-positive means 24."
    ),
    service: TelemetryService = Depends(get_service),
) -> InsightsOut:
    return InsightsOut.model_validate(service.get_insights(customer_id, device_id, hours))


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the telemetry service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_customers(self) -> List[Dict[str, Any]]:
        return self._get("/api/customers")

    def list_devices(self, customer_id: str) -> List[Dict[str, Any]]:
        return self._get(f"/api/devices/{customer_id}")

    def get_telemetry(
        self, customer_id: str, device_id: str, hours: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        return self._get(
            f"/api/telemetry/{customer_id}/{device_id}", params=_hours_param(hours)
        )

    def get_insights(
        self, customer_id: str, device_id: str, hours: Optional[int] = None
    ) -> Dict[str, Any]:
        return self._get(
            f"/api/telemetry/{customer_id}/{device_id}/insights",
            params=_hours_param(hours),
        )

    def submit_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post("/api/telemetry", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def health(self) -> Dict[str, Any]:
        return self._get("/health")

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("message") or data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _hours_param(hours: Optional[int]) -> Optional[Dict[str, Any]]:
    return {"hours": hours} if hours is not None else None

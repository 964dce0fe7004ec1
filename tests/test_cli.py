from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.submitted: List[Dict[str, Any]] = []
        self.queries: List[tuple[str, str, Optional[int]]] = []
        self.duplicate = False
        self.closed = False

    def list_customers(self) -> List[Dict[str, Any]]:
        return [
            {"customerId": "acme-123", "name": "Acme Corporation"},
            {"customerId": "beta-456", "name": "Beta Industries"},
        ]

    def list_devices(self, customer_id: str) -> List[Dict[str, Any]]:
        return [
            {
                "customerId": customer_id,
                "deviceId": "dev-001",
                "label": "Boiler #3",
                "location": "Plant A",
            }
        ]

    def get_telemetry(self, customer_id: str, device_id: str, hours: Optional[int] = None):
        self.queries.append((customer_id, device_id, hours))
        return [
            {
                "eventId": "evt-a9",
                "recordedAt": "2024-01-01T11:00:00Z",
                "receivedAt": "2024-01-01T11:01:00Z",
                "type": "temperature",
                "value": 21.0,
                "unit": "C",
            }
        ]

    def get_insights(self, customer_id: str, device_id: str, hours: Optional[int] = None):
        self.queries.append((customer_id, device_id, hours))
        return {"latest": None, "min": None, "average": None, "max": None, "count": 0, "unit": "C"}

    def submit_event(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.submitted.append(payload)
        return {
            "message": "ok",
            "eventId": payload["eventId"],
            "isDuplicate": self.duplicate,
        }

    def health(self) -> Dict[str, Any]:
        return {"status": "healthy", "timestamp": "2024-01-01T00:00:00Z"}

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    stub = StubClient(config=None)

    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return stub


def test_customers_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["customers"])

    assert result.exit_code == 0
    assert "acme-123: Acme Corporation" in result.stdout
    assert stub.closed is True


def test_devices_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["devices", "acme-123"])

    assert result.exit_code == 0
    assert "dev-001: Boiler #3 (Plant A)" in result.stdout


def test_telemetry_command_passes_hours(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["telemetry", "acme-123", "dev-001", "--hours", "6"])

    assert result.exit_code == 0
    assert stub.queries == [("acme-123", "dev-001", 6)]
    assert "evt-a9" in result.stdout
    assert "21.00 C" in result.stdout


def test_insights_command_renders_empty_window(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["insights", "acme-123", "dev-001"])

    assert result.exit_code == 0
    assert "latest: N/A" in result.stdout
    assert "count: 0" in result.stdout
    assert stub.queries == [("acme-123", "dev-001", None)]


def test_submit_command_builds_payload(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        [
            "submit",
            "acme-123",
            "dev-001",
            "21.5",
            "--event-id",
            "evt-x1",
            "--recorded-at",
            "2024-01-01T10:00:00",
        ],
    )

    assert result.exit_code == 0
    assert "Event accepted. eventId=evt-x1" in result.stdout
    assert stub.submitted == [
        {
            "customerId": "acme-123",
            "deviceId": "dev-001",
            "eventId": "evt-x1",
            "recordedAt": "2024-01-01T10:00:00+00:00",
            "type": "temperature",
            "value": 21.5,
            "unit": "C",
        }
    ]


def test_submit_command_reports_duplicates(runner: CliRunner, stub: StubClient) -> None:
    stub.duplicate = True

    result = runner.invoke(app, ["submit", "acme-123", "dev-001", "1.0"])

    assert result.exit_code == 0
    assert "Duplicate ignored" in result.stdout
    assert stub.submitted[0]["eventId"].startswith("evt-")


def test_base_url_option_reaches_config(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://telemetry:9000/", "health"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://telemetry:9000"
    assert "status: healthy" in result.stdout


def test_client_surfaces_error_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            404,
            json={"kind": "not_found", "message": "Customer nope not found", "retryable": False},
        )

    client = ApiClient(load_config(base_url="http://testserver"))
    client.close()
    client._client = httpx.Client(
        base_url="http://testserver", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(typer.Exit) as excinfo:
        client.list_devices("nope")

    assert excinfo.value.exit_code == 1
    client.close()

from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.thresholds: List[float] = []
        self.sent: List[tuple[float, float]] = []
        self.readings: List[Dict[str, Any]] = [
            {
                "id": f"r{index}",
                "temperature": 20.0 + index,
                "fanSpeed": 10.0 * index,
                "timestamp": f"2024-01-01T00:0{index}:00Z",
            }
            for index in range(3, 0, -1)
        ]
        self.closed = False

    def list_readings(self) -> List[Dict[str, Any]]:
        return self.readings

    def get_config(self) -> Dict[str, Any]:
        return {"id": "singleton", "threshold": 30.0, "lastUpdated": "2024-01-01T00:00:00Z"}

    def set_threshold(self, threshold: float) -> Dict[str, Any]:
        self.thresholds.append(threshold)
        return {"id": "singleton", "threshold": threshold, "lastUpdated": "2024-01-02T00:00:00Z"}

    def send_reading(self, temperature: float, fan_speed: float) -> Dict[str, Any]:
        self.sent.append((temperature, fan_speed))
        return {
            "id": "new",
            "temperature": temperature,
            "fanSpeed": fan_speed,
            "timestamp": "2024-01-03T00:00:00Z",
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    instance = StubClient(config=None)

    def factory(config):
        instance.config = config
        return instance

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return instance


def test_readings_command_with_limit(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["readings", "--limit", "2"])

    assert result.exit_code == 0
    assert "Readings (2)" in result.stdout
    assert "temperature=23.0" in result.stdout
    assert "temperature=21.0" not in result.stdout
    assert stub.closed is True


def test_config_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["config"])

    assert result.exit_code == 0
    assert "threshold: 30.0" in result.stdout


def test_set_threshold_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://device.test/", "set-threshold", "42"])

    assert result.exit_code == 0
    assert stub.thresholds == [42.0]
    assert stub.config.base_url == "http://device.test"
    assert "Threshold updated to 42.0" in result.stdout


def test_send_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["send", "25.5", "60"])

    assert result.exit_code == 0
    assert stub.sent == [(25.5, 60.0)]
    assert "fanSpeed: 60.0" in result.stdout


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("FANCTL_API_URL", "http://env.test/")
    monkeypatch.setenv("FANCTL_HTTP_TIMEOUT", "-3")

    config = load_config()

    assert config.base_url == "http://env.test"
    assert config.timeout == 10.0


def test_api_client_surfaces_server_error_message(monkeypatch, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Threshold value is required"})

    client = ApiClient(CLIConfig(base_url="http://test"))
    client._client = httpx.Client(
        base_url="http://test", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(typer.Exit) as excinfo:
        client.set_threshold(1.0)

    assert excinfo.value.exit_code == 1
    assert "Threshold value is required" in capsys.readouterr().err
    client.close()

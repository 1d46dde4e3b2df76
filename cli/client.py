from __future__ import annotations

from typing import Any, Dict, List, NoReturn

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the fan controller backend."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_readings(self) -> List[Dict[str, Any]]:
        payload = self._request("GET", "/api/data")
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when listing readings.")
        return payload

    def get_config(self) -> Dict[str, Any]:
        return self._request("GET", "/api/config")

    def set_threshold(self, threshold: float) -> Dict[str, Any]:
        return self._request("POST", "/api/config", json={"threshold": threshold})

    def send_reading(self, temperature: float, fan_speed: float) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/api/esp8266/data",
            json={"temperature": temperature, "fanSpeed": fan_speed},
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

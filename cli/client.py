from __future__ import annotations

from typing import Any, Dict, NoReturn, Optional

import httpx

from cli.config import CLIConfig


class ApiError(Exception):
    """Raised when the sensor service is unreachable or answers with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiClient:
    """Minimal HTTP client for the sensor service."""

    def __init__(
        self,
        config: CLIConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def send_reading(self, time_occurred: Any, angle: Any) -> Dict[str, Any]:
        payload = {"timeOccurred": time_occurred, "angle": angle}
        return self._request("POST", "/api/sensor", json=payload)

    def list_readings(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit is not None else None
        return self._request("GET", "/api/sensor", params=params)

    def latest_reading(self) -> Optional[Dict[str, Any]]:
        payload = self._request("GET", "/api/sensor/latest")
        return payload.get("reading")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.RequestError as exc:
            raise ApiError(f"Could not reach {self._config.base_url}: {exc}") from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error") or data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        status_code = exc.response.status_code
        raise ApiError(
            f"Request failed with status {status_code}: {detail or 'no detail provided.'}",
            status_code=status_code,
        ) from exc

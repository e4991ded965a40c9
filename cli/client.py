from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the correlator service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def correlate_files(
        self,
        csv_path: Path,
        json_path: Path,
        threshold_m: Optional[float] = None,
    ) -> Dict[str, Any]:
        for path in (csv_path, json_path):
            if not path.is_file():
                raise typer.BadParameter(f"File {path} does not exist.")

        data = {"threshold_m": str(threshold_m)} if threshold_m is not None else None
        try:
            with csv_path.open("rb") as csv_handle, json_path.open("rb") as json_handle:
                response = self._client.post(
                    "/correlations/files",
                    files={
                        "csv_file": (csv_path.name, csv_handle, "text/csv"),
                        "json_file": (json_path.name, json_handle, "application/json"),
                    },
                    data=data,
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        payload = response.json()
        if not isinstance(payload.get("pairs"), dict):
            raise typer.BadParameter("Unexpected response payload when correlating files.")
        return payload

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except (ValueError, AttributeError):
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

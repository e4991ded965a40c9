from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from services.runner import build_default_service
from settings import get_settings


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.calls: List[tuple[Path, Path, Optional[float]]] = []
        self.payload: Dict[str, Any] = {
            "pairs": {"1": 100, "2": 100},
            "match_count": 2,
            "threshold_m": 100.0,
            "errors_a": [{"row_number": 4, "reason": "invalid id"}],
            "errors_b": [],
        }
        self.closed = False

    def correlate_files(
        self, csv_path: Path, json_path: Path, threshold_m: Optional[float] = None
    ) -> Dict[str, Any]:
        self.calls.append((csv_path, json_path, threshold_m))
        return self.payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def fresh_service_cache() -> Iterator[None]:
    get_settings.cache_clear()
    build_default_service.cache_clear()
    yield
    build_default_service.cache_clear()
    get_settings.cache_clear()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def _write_inputs(root: Path) -> None:
    (root / "SensorData1.csv").write_text(
        "id,latitude,longitude\n1,10.0,20.0\n2,10.0002,20.0\n3,50.0,50.0\n"
    )
    (root / "SensorData2.json").write_text(
        '[{"Id": 100, "Latitude": 10.0001, "Longitude": 20.0}]'
    )


def test_run_writes_results_and_reports_pairs(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)
    _write_inputs(tmp_path)

    result = runner.invoke(app, ["run", "--data-dir", str(tmp_path)])

    assert result.exit_code == 0
    output_path = tmp_path / "CorrelatedSensors.json"
    assert f"Results saved to {output_path}" in result.stdout
    assert "Correlated Sensors:" in result.stdout
    assert "A-id: 1, B-id: 100" in result.stdout
    assert "A-id: 2, B-id: 100" in result.stdout
    assert "A-id: 3" not in result.stdout
    assert json.loads(output_path.read_text()) == {"1": 100, "2": 100}
    assert stub.closed is True


def test_run_with_threshold_and_output(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    _write_inputs(tmp_path)
    output_path = tmp_path / "out" / "pairs.json"

    result = runner.invoke(
        app,
        ["run", "-d", str(tmp_path), "-o", str(output_path), "--threshold", "5"],
    )

    assert result.exit_code == 0
    assert json.loads(output_path.read_text()) == {}


def test_run_missing_input_exits_with_error(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    (tmp_path / "SensorData1.csv").write_text("id,latitude,longitude\n")

    result = runner.invoke(app, ["run", "--data-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "SensorData2.json" in result.output
    assert not (tmp_path / "CorrelatedSensors.json").exists()


def test_run_rejects_non_positive_threshold(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    _write_inputs(tmp_path)

    result = runner.invoke(app, ["run", "-d", str(tmp_path), "--threshold", "0"])

    assert result.exit_code == 2


def test_submit_command(monkeypatch, runner: CliRunner, tmp_path) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)
    _write_inputs(tmp_path)
    csv_path = tmp_path / "SensorData1.csv"
    json_path = tmp_path / "SensorData2.json"

    result = runner.invoke(
        app,
        ["--base-url", "http://correlator:9000/", "submit", str(csv_path), str(json_path), "-t", "50"],
    )

    assert result.exit_code == 0
    assert stub.calls == [(csv_path, json_path, 50.0)]
    assert stub.config.base_url == "http://correlator:9000"
    assert "Correlation Result" in result.stdout
    assert "match_count: 2" in result.stdout
    assert "CSV row 4: invalid id" in result.stdout
    assert "A-id: 1, B-id: 100" in result.stdout
    assert stub.closed is True


def test_run_non_utf8_input_exits_with_message(monkeypatch, runner: CliRunner, tmp_path) -> None:
    _install_stub(monkeypatch, StubClient(config=None))
    _write_inputs(tmp_path)
    (tmp_path / "SensorData1.csv").write_bytes(b"id,latitude,longitude\n1,10.0,\xff20.0\n")

    result = runner.invoke(app, ["run", "--data-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert "is not valid UTF-8" in result.output
    assert not (tmp_path / "CorrelatedSensors.json").exists()

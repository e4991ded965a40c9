from __future__ import annotations

import json
from pathlib import Path

import pytest

from services.correlator import Correlator
from services.errors import InputFileNotFoundError
from services.runner import CorrelationService


def _write_inputs(root: Path) -> None:
    (root / "SensorData1.csv").write_text(
        "id,latitude,longitude\n"
        "1,10.0,20.0\n"
        "2,91.0,20.0\n"
        "3,45.0,45.0\n"
        "bad,1.0,1.0\n"
    )
    (root / "SensorData2.json").write_text(
        json.dumps(
            [
                {"Id": 100, "Latitude": 10.0005, "Longitude": 20.0005},
                {"Id": 200, "Latitude": 91.0, "Longitude": 20.0},
            ]
        )
    )


@pytest.fixture()
def service(tmp_path) -> CorrelationService:
    return CorrelationService(
        correlator=Correlator(),
        data_dir=tmp_path,
        csv_name="SensorData1.csv",
        json_name="SensorData2.json",
        output_name="CorrelatedSensors.json",
    )


def test_run_writes_output_file(service: CorrelationService, tmp_path) -> None:
    _write_inputs(tmp_path)

    run = service.run()

    assert run.mapping == {1: 100}
    assert run.output_path == tmp_path / "CorrelatedSensors.json"
    assert json.loads(run.output_path.read_text()) == {"1": 100}
    assert run.source_a_count == 3
    assert run.source_b_count == 2
    assert run.invalid_a_count == 1
    assert run.invalid_b_count == 1
    assert [error.row_number for error in run.errors_a] == [5]
    assert run.errors_b == []
    assert run.processing_ms >= 0


def test_run_with_overridden_paths(service: CorrelationService, tmp_path) -> None:
    data_dir = tmp_path / "inputs"
    data_dir.mkdir()
    _write_inputs(data_dir)
    output = tmp_path / "results" / "pairs.json"

    run = service.run(data_dir=data_dir, output_path=output)

    assert run.output_path == output
    assert json.loads(output.read_text()) == {"1": 100}
    assert not (tmp_path / "CorrelatedSensors.json").exists()


def test_run_missing_input_aborts(service: CorrelationService, tmp_path) -> None:
    (tmp_path / "SensorData1.csv").write_text("id,latitude,longitude\n1,10.0,20.0\n")

    with pytest.raises(InputFileNotFoundError):
        service.run()

    assert not (tmp_path / "CorrelatedSensors.json").exists()

"""Locating and parsing the two sensor input files."""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from pydantic import ValidationError

from app.schemas import RecordError, SensorRecordIn
from models.records import SensorRecord
from services.errors import InputFileNotFoundError, MalformedInputError

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("id", "latitude", "longitude")


@dataclass(frozen=True)
class InputPaths:
    csv_path: Path
    json_path: Path


@dataclass
class ParsedRecords:
    """Records parsed from one source plus the rows that were skipped."""

    records: List[SensorRecord] = field(default_factory=list)
    errors: List[RecordError] = field(default_factory=list)


@dataclass
class LoadedSources:
    source_a: ParsedRecords
    source_b: ParsedRecords


def locate_inputs(data_dir: Path | str, csv_name: str, json_name: str) -> InputPaths:
    """Resolve both input files under ``data_dir``, failing if either is absent."""
    root = Path(data_dir)
    csv_path = root / csv_name
    json_path = root / json_name
    for path in (csv_path, json_path):
        if not path.is_file():
            raise InputFileNotFoundError(path)
    return InputPaths(csv_path=csv_path, json_path=json_path)


def _skip(errors: List[RecordError], row_number: int, reason: str) -> None:
    errors.append(RecordError(row_number=row_number, reason=reason))
    logger.warning("Skipping input row", extra={"row_number": row_number, "reason": reason})


def _parse_coordinate(raw: str) -> float:
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"non-finite coordinate {raw!r}")
    return value


def parse_csv_records(text: str) -> ParsedRecords:
    """Parse CSV text with an ``id,latitude,longitude`` header.

    Header names are matched case-insensitively. Rows with a missing or
    non-numeric value are skipped and reported with their line number.
    """
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise MalformedInputError("CSV file is missing a header row.")

    normalized = {name.lower().strip(): name for name in reader.fieldnames if name}
    missing = [column for column in _REQUIRED_COLUMNS if column not in normalized]
    if missing:
        raise MalformedInputError(f"CSV missing required columns: {', '.join(missing)}")

    id_col = normalized["id"]
    lat_col = normalized["latitude"]
    lon_col = normalized["longitude"]

    parsed = ParsedRecords()
    for row_number, row in enumerate(reader, start=2):
        id_raw = (row.get(id_col) or "").strip()
        lat_raw = (row.get(lat_col) or "").strip()
        lon_raw = (row.get(lon_col) or "").strip()

        if not id_raw:
            _skip(parsed.errors, row_number, "missing id")
            continue
        try:
            record_id = int(id_raw)
        except ValueError:
            _skip(parsed.errors, row_number, "invalid id")
            continue

        if not lat_raw or not lon_raw:
            _skip(parsed.errors, row_number, "missing coordinate")
            continue
        try:
            latitude = _parse_coordinate(lat_raw)
            longitude = _parse_coordinate(lon_raw)
        except ValueError:
            _skip(parsed.errors, row_number, "invalid coordinate")
            continue

        parsed.records.append(SensorRecord(id=record_id, latitude=latitude, longitude=longitude))

    return parsed


def parse_json_records(text: str) -> ParsedRecords:
    """Parse a JSON array of ``{"Id", "Latitude", "Longitude"}`` objects.

    ``row_number`` in the reported errors is the 1-based array position.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"Invalid JSON: {exc.msg}") from exc

    parsed = ParsedRecords()
    if payload is None:
        return parsed
    if not isinstance(payload, list):
        raise MalformedInputError("JSON input must be an array of sensor records.")

    for position, item in enumerate(payload, start=1):
        try:
            record_in = SensorRecordIn.model_validate(item)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            reason = f"{location}: {first['msg']}" if location else first["msg"]
            _skip(parsed.errors, position, reason)
            continue
        if not (math.isfinite(record_in.latitude) and math.isfinite(record_in.longitude)):
            _skip(parsed.errors, position, "invalid coordinate")
            continue
        parsed.records.append(record_in.to_record())

    return parsed


def _read_input(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise InputFileNotFoundError(path) from exc
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"{path} is not valid UTF-8") from exc
    except OSError as exc:
        raise MalformedInputError(f"{path} could not be read: {exc.strerror or exc}") from exc


def load_sources(paths: InputPaths) -> LoadedSources:
    """Read and parse both input files."""
    csv_text = _read_input(paths.csv_path)
    json_text = _read_input(paths.json_path)

    source_a = parse_csv_records(csv_text)
    logger.info(
        "Loaded CSV records",
        extra={"path": str(paths.csv_path), "record_count": len(source_a.records)},
    )
    source_b = parse_json_records(json_text)
    logger.info(
        "Loaded JSON records",
        extra={"path": str(paths.json_path), "record_count": len(source_b.records)},
    )
    return LoadedSources(source_a=source_a, source_b=source_b)

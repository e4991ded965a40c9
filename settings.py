from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_DATA_DIR_ENV = "CORRELATOR_DATA_DIR"
_CSV_NAME_ENV = "CORRELATOR_CSV_NAME"
_JSON_NAME_ENV = "CORRELATOR_JSON_NAME"
_OUTPUT_NAME_ENV = "CORRELATOR_OUTPUT_NAME"
_THRESHOLD_ENV = "CORRELATOR_THRESHOLD_M"
_WORKER_COUNT_ENV = "CORRELATOR_WORKER_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_THRESHOLD_M = 100.0


@dataclass(frozen=True)
class Settings:
    data_dir: str
    csv_name: str
    json_name: str
    output_name: str
    threshold_m: float
    workers: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_threshold(default: float) -> float:
    value = os.getenv(_THRESHOLD_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_worker_count(default: int) -> int:
    value = os.getenv(_WORKER_COUNT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        data_dir=_read_str_env(_DATA_DIR_ENV, "."),
        csv_name=_read_str_env(_CSV_NAME_ENV, "SensorData1.csv"),
        json_name=_read_str_env(_JSON_NAME_ENV, "SensorData2.json"),
        output_name=_read_str_env(_OUTPUT_NAME_ENV, "CorrelatedSensors.json"),
        threshold_m=_read_threshold(DEFAULT_THRESHOLD_M),
        workers=_read_worker_count(1),
        log_level=_read_log_level("INFO"),
    )

"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

CorrelationMap = Dict[int, int]
"""A-record id -> B-record id, in the order matches were found."""


@dataclass(frozen=True, slots=True)
class SensorRecord:
    """A geolocated sensor reading from either input source."""

    id: int
    latitude: float
    longitude: float

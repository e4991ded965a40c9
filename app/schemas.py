"""Pydantic schemas for the HTTP API layer and JSON input parsing."""

from __future__ import annotations

from typing import Dict, List

from pydantic import AliasChoices, BaseModel, Field

from models.records import CorrelationMap, SensorRecord
from settings import DEFAULT_THRESHOLD_M


class SensorRecordIn(BaseModel):
    """A sensor record as it appears in JSON, in either naming convention."""

    id: int = Field(..., validation_alias=AliasChoices("Id", "id"))
    latitude: float = Field(..., validation_alias=AliasChoices("Latitude", "latitude"))
    longitude: float = Field(..., validation_alias=AliasChoices("Longitude", "longitude"))

    def to_record(self) -> SensorRecord:
        return SensorRecord(id=self.id, latitude=self.latitude, longitude=self.longitude)


class RecordError(BaseModel):
    """Details about an input row that was skipped."""

    row_number: int = Field(..., ge=1)
    reason: str


class CorrelationRequest(BaseModel):
    """Two in-memory record lists to correlate."""

    source_a: List[SensorRecordIn] = Field(default_factory=list)
    source_b: List[SensorRecordIn] = Field(default_factory=list)
    threshold_m: float = Field(default=DEFAULT_THRESHOLD_M, gt=0)


class CorrelationResponse(BaseModel):
    """Correlated id pairs keyed by the string form of the A-record id."""

    pairs: Dict[str, int] = Field(default_factory=dict)
    match_count: int = Field(..., ge=0)
    threshold_m: float
    errors_a: List[RecordError] = Field(default_factory=list)
    errors_b: List[RecordError] = Field(default_factory=list)

    @classmethod
    def from_mapping(
        cls,
        mapping: CorrelationMap,
        threshold_m: float,
        errors_a: List[RecordError] | None = None,
        errors_b: List[RecordError] | None = None,
    ) -> "CorrelationResponse":
        return cls(
            pairs={str(a_id): b_id for a_id, b_id in mapping.items()},
            match_count=len(mapping),
            threshold_m=threshold_m,
            errors_a=errors_a or [],
            errors_b=errors_b or [],
        )

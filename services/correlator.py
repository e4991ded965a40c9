"""Proximity matching between two sets of sensor records."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from models.records import CorrelationMap, SensorRecord
from services.geo import haversine_distance, is_invalid_coordinate
from settings import DEFAULT_THRESHOLD_M

logger = logging.getLogger(__name__)


def find_first_match(
    record: SensorRecord,
    candidates: Sequence[SensorRecord],
    threshold_m: float = DEFAULT_THRESHOLD_M,
) -> Optional[SensorRecord]:
    """Return the first valid candidate within ``threshold_m`` of ``record``.

    Candidates are scanned in their given order and the scan stops at the first
    hit, so a closer candidate further down the sequence is never considered.
    """
    for candidate in candidates:
        if is_invalid_coordinate(candidate.latitude, candidate.longitude):
            continue
        distance = haversine_distance(
            record.latitude, record.longitude, candidate.latitude, candidate.longitude
        )
        if distance <= threshold_m:
            logger.debug(
                "Matched sensor record",
                extra={"a_id": record.id, "b_id": candidate.id, "distance_m": round(distance, 3)},
            )
            return candidate
    return None


def correlate(
    source_a: Sequence[SensorRecord],
    source_b: Sequence[SensorRecord],
    threshold_m: float = DEFAULT_THRESHOLD_M,
) -> CorrelationMap:
    """Map each A-record id to the id of its first B-record within range.

    A-records with out-of-range coordinates are skipped, as are B-records. A
    B-record may be the match for several A-records.
    """
    correlated: CorrelationMap = {}
    for record in source_a:
        if is_invalid_coordinate(record.latitude, record.longitude):
            logger.debug(
                "Skipping record with invalid coordinates",
                extra={"record_id": record.id, "reason": "invalid coordinate"},
            )
            continue
        match = find_first_match(record, source_b, threshold_m)
        if match is not None:
            correlated[record.id] = match.id
    return correlated


class Correlator:
    """Correlation component bound to a threshold and worker count."""

    def __init__(self, threshold_m: float = DEFAULT_THRESHOLD_M, workers: int = 1) -> None:
        self.threshold_m = threshold_m
        self.workers = max(1, workers)

    def correlate(
        self,
        source_a: Sequence[SensorRecord],
        source_b: Sequence[SensorRecord],
    ) -> CorrelationMap:
        if self.workers == 1 or len(source_a) < 2:
            result = correlate(source_a, source_b, self.threshold_m)
        else:
            result = self._correlate_parallel(source_a, source_b)

        logger.info(
            "Correlation finished",
            extra={"record_count": len(source_a), "match_count": len(result)},
        )
        return result

    def _correlate_parallel(
        self,
        source_a: Sequence[SensorRecord],
        source_b: Sequence[SensorRecord],
    ) -> CorrelationMap:
        def match_one(record: SensorRecord) -> Optional[SensorRecord]:
            if is_invalid_coordinate(record.latitude, record.longitude):
                return None
            return find_first_match(record, source_b, self.threshold_m)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            matches = list(executor.map(match_one, source_a))

        # executor.map yields in input order, so insertion order matches a sequential run.
        correlated: CorrelationMap = {}
        for record, match in zip(source_a, matches):
            if match is not None:
                correlated[record.id] = match.id
        return correlated

"""Orchestration of a full correlation run over files on disk."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from app.schemas import RecordError
from models.records import CorrelationMap
from services.correlator import Correlator
from services.geo import is_invalid_coordinate
from services.loader import load_sources, locate_inputs
from services.writer import write_correlations
from settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class CorrelationRun:
    """Outcome of one correlation run."""

    mapping: CorrelationMap
    output_path: Path
    source_a_count: int = 0
    source_b_count: int = 0
    invalid_a_count: int = 0
    invalid_b_count: int = 0
    errors_a: List[RecordError] = field(default_factory=list)
    errors_b: List[RecordError] = field(default_factory=list)
    processing_ms: int = 0


class CorrelationService:
    """Locates inputs, correlates them and writes the result file."""

    def __init__(
        self,
        correlator: Correlator,
        data_dir: Path,
        csv_name: str,
        json_name: str,
        output_name: str,
    ) -> None:
        self.correlator = correlator
        self.data_dir = data_dir
        self.csv_name = csv_name
        self.json_name = json_name
        self.output_name = output_name

    def run(
        self,
        data_dir: Optional[Path] = None,
        output_path: Optional[Path] = None,
    ) -> CorrelationRun:
        start_time = time.perf_counter()
        root = data_dir or self.data_dir
        paths = locate_inputs(root, self.csv_name, self.json_name)
        sources = load_sources(paths)

        source_a = sources.source_a.records
        source_b = sources.source_b.records
        mapping = self.correlator.correlate(source_a, source_b)

        destination = output_path or root / self.output_name
        write_correlations(mapping, destination)

        processing_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Correlation results written",
            extra={
                "path": str(destination),
                "match_count": len(mapping),
                "processing_ms": processing_ms,
            },
        )
        return CorrelationRun(
            mapping=mapping,
            output_path=destination,
            source_a_count=len(source_a),
            source_b_count=len(source_b),
            invalid_a_count=sum(
                1 for r in source_a if is_invalid_coordinate(r.latitude, r.longitude)
            ),
            invalid_b_count=sum(
                1 for r in source_b if is_invalid_coordinate(r.latitude, r.longitude)
            ),
            errors_a=list(sources.source_a.errors),
            errors_b=list(sources.source_b.errors),
            processing_ms=processing_ms,
        )


@lru_cache
def build_default_service(threshold_m: Optional[float] = None) -> CorrelationService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    correlator = Correlator(
        threshold_m=threshold_m or settings.threshold_m,
        workers=settings.workers,
    )
    return CorrelationService(
        correlator=correlator,
        data_dir=Path(settings.data_dir),
        csv_name=settings.csv_name,
        json_name=settings.json_name,
        output_name=settings.output_name,
    )

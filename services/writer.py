"""Serialization of correlation results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from models.records import CorrelationMap


def serialize_correlations(mapping: CorrelationMap, indent: Optional[int] = 2) -> str:
    """Render the mapping as a JSON object keyed by the A-record id string."""
    payload = {str(a_id): b_id for a_id, b_id in mapping.items()}
    return json.dumps(payload, indent=indent)


def write_correlations(mapping: CorrelationMap, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_correlations(mapping), encoding="utf-8")
    return path


def format_pair(a_id: int, b_id: int) -> str:
    return f"A-id: {a_id}, B-id: {b_id}"

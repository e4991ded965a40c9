"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.schemas import CorrelationRequest, CorrelationResponse
from services.correlator import Correlator
from services.loader import parse_csv_records, parse_json_records
from settings import get_settings

router = APIRouter()


def get_default_threshold() -> float:
    return get_settings().threshold_m


def _build_correlator(threshold_m: float) -> Correlator:
    return Correlator(threshold_m=threshold_m, workers=get_settings().workers)


async def _read_upload(upload: UploadFile) -> str:
    contents = await upload.read()
    if not contents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty.",
        )
    try:
        return contents.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is not valid UTF-8.",
        ) from exc


@router.post(
    "/correlations",
    response_model=CorrelationResponse,
    summary="Correlate two lists of sensor records by proximity.",
)
async def correlate_records(request: CorrelationRequest) -> CorrelationResponse:
    source_a = [record.to_record() for record in request.source_a]
    source_b = [record.to_record() for record in request.source_b]
    mapping = _build_correlator(request.threshold_m).correlate(source_a, source_b)
    return CorrelationResponse.from_mapping(mapping, request.threshold_m)


@router.post(
    "/correlations/files",
    response_model=CorrelationResponse,
    summary="Correlate an uploaded CSV file against an uploaded JSON file.",
)
async def correlate_files(
    csv_file: UploadFile = File(..., description="CSV with id,latitude,longitude columns."),
    json_file: UploadFile = File(..., description="JSON array of Id/Latitude/Longitude objects."),
    threshold_m: float | None = Form(default=None, gt=0),
    default_threshold: float = Depends(get_default_threshold),
) -> CorrelationResponse:
    threshold = threshold_m if threshold_m is not None else default_threshold
    csv_text = await _read_upload(csv_file)
    json_text = await _read_upload(json_file)
    try:
        source_a = parse_csv_records(csv_text)
        source_b = parse_json_records(json_text)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    mapping = _build_correlator(threshold).correlate(source_a.records, source_b.records)
    return CorrelationResponse.from_mapping(
        mapping,
        threshold,
        errors_a=source_a.errors,
        errors_b=source_b.errors,
    )

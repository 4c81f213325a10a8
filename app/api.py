"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from app.schemas import (
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    LatestReadingResponse,
    ReadingListResponse,
    ReadingOut,
    format_timestamp,
)
from services.ingestion import IngestionService, MalformedPayloadError
from services.query import QueryService

router = APIRouter(prefix="/api")


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion


def get_query(request: Request) -> QueryService:
    return request.app.state.query


@router.post(
    "/sensor",
    status_code=status.HTTP_201_CREATED,
    response_model=IngestResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Receive a reading from the sensor device.",
)
async def ingest_reading(
    request: Request,
    ingestion: IngestionService = Depends(get_ingestion),
) -> IngestResponse:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise MalformedPayloadError("Request body must be valid JSON") from exc
    reading = ingestion.accept(payload)
    return IngestResponse(reading=ReadingOut.from_reading(reading))


@router.get(
    "/sensor",
    response_model=ReadingListResponse,
    summary="List retained readings, newest first.",
)
def list_readings(
    limit: Optional[int] = Query(
        None, ge=1, description="Return only the newest N readings."
    ),
    query: QueryService = Depends(get_query),
) -> ReadingListResponse:
    snapshot = query.list_all(limit=limit)
    return ReadingListResponse(
        count=snapshot.count,
        readings=[ReadingOut.from_reading(reading) for reading in snapshot.readings],
    )


@router.get(
    "/sensor/latest",
    response_model=LatestReadingResponse,
    summary="Fetch the most recent reading, or null when none exist.",
)
def latest_reading(
    query: QueryService = Depends(get_query),
) -> LatestReadingResponse:
    reading = query.latest()
    if reading is None:
        return LatestReadingResponse(reading=None)
    return LatestReadingResponse(reading=ReadingOut.from_reading(reading))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=format_timestamp(datetime.now(timezone.utc)))

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router
from app.schemas import ErrorResponse
from datastore.reading_store import ReadingStore
from logging_config import configure_logging
from services.ingestion import IngestionService, ReadingValidationError
from services.query import QueryService
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

_ENDPOINTS = (
    "POST /api/sensor",
    "GET /api/sensor",
    "GET /api/sensor/latest",
    "GET /api/health",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    store: ReadingStore = app.state.store
    logger.info(
        "Sensor service ready, endpoints: %s",
        ", ".join(_ENDPOINTS),
        extra={"capacity": store.capacity},
    )
    try:
        yield
    finally:
        logger.info("Sensor service stopping", extra={"count": store.count()})


async def _reading_validation_handler(
    _request: Request, exc: ReadingValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg')}")
    message = "; ".join(problems) or "Invalid request"
    logger.warning("Rejected request parameters: %s", message, extra={"status_code": 400})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=message).model_dump(),
    )


def create_app(
    store: Optional[ReadingStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the application around one explicitly owned reading store."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = store if store is not None else ReadingStore(capacity=settings.max_readings)

    app = FastAPI(
        title="Sensor Angle Telemetry",
        description="Ingests angle readings from a sensor device and serves the recent history.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.ingestion = IngestionService(store, angle_coercion=settings.angle_coercion)
    app.state.query = QueryService(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ReadingValidationError, _reading_validation_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


app = create_app()


if __name__ == "__main__":
    run()

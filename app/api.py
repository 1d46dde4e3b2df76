"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from app.schemas import Config, ErrorResponse, Reading, ReadingCreate, ThresholdUpdate
from datastore.document_store import StorageError
from services.config_service import ConfigService, build_default_config_service
from services.errors import ValidationError
from services.ingestion import IngestionService, build_default_ingestion_service
from services.query import QueryService, build_default_query_service

LIVENESS_MESSAGE = "Fan controller backend is running"

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}

router = APIRouter()


def get_config_service() -> ConfigService:
    return build_default_config_service()


def get_ingestion_service() -> IngestionService:
    return build_default_ingestion_service()


def get_query_service() -> QueryService:
    return build_default_query_service()


def _storage_failure(exc: StorageError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )


@router.get("/", response_class=PlainTextResponse, summary="Liveness message.")
async def root() -> str:
    return LIVENESS_MESSAGE


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/api/data",
    response_model=list[Reading],
    responses=_ERROR_RESPONSES,
    summary="Most recent readings, newest first.",
)
async def list_readings(
    query: QueryService = Depends(get_query_service),
) -> list[Reading]:
    try:
        return query.recent_readings()
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@router.get(
    "/api/config",
    response_model=Config,
    responses=_ERROR_RESPONSES,
    summary="Current threshold configuration.",
)
async def read_config(
    config_service: ConfigService = Depends(get_config_service),
) -> Config:
    try:
        return config_service.get_config()
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@router.post(
    "/api/config",
    response_model=Config,
    responses=_ERROR_RESPONSES,
    summary="Update the threshold and notify live clients.",
)
async def update_config(
    body: Optional[ThresholdUpdate] = None,
    config_service: ConfigService = Depends(get_config_service),
) -> Config:
    try:
        return config_service.set_threshold(body.threshold if body else None)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@router.post(
    "/api/esp8266/data",
    response_model=Reading,
    responses=_ERROR_RESPONSES,
    summary="Endpoint for devices to report a reading.",
)
async def ingest_reading(
    body: Optional[ReadingCreate] = None,
    ingestion: IngestionService = Depends(get_ingestion_service),
) -> Reading:
    try:
        payload = body or ReadingCreate()
        return ingestion.record_reading(payload.temperature, payload.fan_speed)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StorageError as exc:
        raise _storage_failure(exc) from exc


@router.get(
    "/api/esp8266/config",
    response_model=Config,
    responses=_ERROR_RESPONSES,
    summary="Current configuration as polled by devices.",
)
async def read_device_config(
    config_service: ConfigService = Depends(get_config_service),
) -> Config:
    try:
        return config_service.get_config()
    except StorageError as exc:
        raise _storage_failure(exc) from exc

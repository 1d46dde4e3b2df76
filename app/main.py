from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router
from app.realtime import router as realtime_router
from datastore.document_store import StorageError, build_default_store
from logging_config import configure_logging
from services.config_service import build_default_config_service
from services.ingestion import build_default_ingestion_service
from services.notifier import build_default_notifier
from services.query import build_default_query_service
from settings import get_settings

logger = logging.getLogger(__name__)

_CACHED_FACTORIES = (
    build_default_config_service,
    build_default_ingestion_service,
    build_default_query_service,
    build_default_notifier,
    build_default_store,
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    try:
        build_default_config_service().ensure_config_exists()
    except StorageError as exc:
        logger.error("Config initialization failed", extra={"reason": str(exc)})
    try:
        yield
    finally:
        for factory in _CACHED_FACTORIES:
            factory.cache_clear()


async def _render_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _render_validation_error(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body: " + "; ".join(problems)},
    )


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Fan Controller Backend",
        description="Stores device readings and serves the shared fan threshold.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _render_http_error)
    app.add_exception_handler(RequestValidationError, _render_validation_error)
    app.include_router(router)
    if settings.realtime_enabled:
        app.include_router(realtime_router)
    return app

app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)

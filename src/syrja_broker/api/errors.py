"""Translate domain and storage failures into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from syrja_broker.core.errors import DirectoryError

logger = logging.getLogger(__name__)


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    """Render a DirectoryError with its status code and machine-readable code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": str(exc)},
    )


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report request bodies of the wrong shape as a 400 in the directory error format."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "invalid_request", "detail": "Malformed request body"},
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report storage failures as a generic server error."""
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "storage_error", "detail": "Directory storage is unavailable"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the broker's exception handlers on ``app``."""
    app.add_exception_handler(DirectoryError, directory_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

"""Translate service errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..exceptions import (
    GeoIntelError,
    GeofenceNotFound,
    InvalidGeometry,
    NoMatchFound,
    RouteNotFound,
    ServiceUnavailable,
    UnsupportedRegion,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (UnsupportedRegion, status.HTTP_400_BAD_REQUEST),
    (InvalidGeometry, status.HTTP_400_BAD_REQUEST),
    (ValidationFailed, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NoMatchFound, status.HTTP_404_NOT_FOUND),
    (RouteNotFound, status.HTTP_404_NOT_FOUND),
    (GeofenceNotFound, status.HTTP_404_NOT_FOUND),
    (ServiceUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: Exception) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def _body(exc: Exception) -> dict:
    body = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ValidationFailed):
        body["suggestions"] = [
            {
                "formatted_address": getattr(suggestion, "formatted_address", None),
                "place_id": getattr(suggestion, "place_id", None),
            }
            for suggestion in exc.suggestions
        ]
    return body


async def _handle_geointel_error(request: Request, exc: GeoIntelError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({code}): {exc}")
    return JSONResponse(status_code=code, content=_body(exc))


async def _handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_body(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GeoIntelError, _handle_geointel_error)
    app.add_exception_handler(ValueError, _handle_value_error)

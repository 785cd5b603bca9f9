#!/usr/bin/env python3
"""
Error handlers for the web application.

Domain errors from core.exceptions are mapped to HTTP status codes and
rendered in the `{success: false, message, type}` envelope.
"""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import (
    AggregateSyncError,
    AuthorizationError,
    ConflictError,
    InvalidStateTransition,
    JobBoardError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .config import get_config

logger = logging.getLogger(__name__)

# Checked in order; first match wins
STATUS_CODES = (
    (ValidationError, 400),
    (InvalidStateTransition, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageError, 502),
    (AggregateSyncError, 500),
)


def status_code_for(exc: JobBoardError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return 500


def _envelope(message: str, error_type: str, **extra: Any) -> Dict[str, Any]:
    content = {
        "success": False,
        "message": message,
        "type": error_type,
    }
    content.update(extra)
    return content


async def job_board_exception_handler(
    request: Request,
    exc: JobBoardError
) -> JSONResponse:
    """
    Handle domain exceptions raised by core and services.

    Args:
        request: The FastAPI request.
        exc: The domain exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=_envelope(exc.message, exc.__class__.__name__, **exc.details)
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=_envelope("Validation failed", "ValidationError", errors=errors)
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(str(exc.detail), "HTTPException"),
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Technical detail is only included in development.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    extra = {}
    if get_config().app.is_development:
        extra["error"] = str(exc)

    return JSONResponse(
        status_code=500,
        content=_envelope("Internal server error", "InternalError", **extra)
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(JobBoardError, job_board_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

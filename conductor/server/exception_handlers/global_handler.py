"""
Exception Handlers for the FastAPI Application.

Every failure leaves the API in the Conductor error envelope
``{"err": true, "errMsg": ...}``:

- ``ConductorError``: its own status code, message and error code
- request validation errors: 400 with ``err1`` and the offending fields
- anything else: 500 with ``err6`` plus an error ID that is logged together
  with the full request context and traceback
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from conductor.core.errors import CONDUCTOR_ERRORS, ConductorError
from conductor.core.logging_config import get_logger
from conductor.core.monitoring import log_error

logger = get_logger(__name__)


async def conductor_error_handler(request: Request, exc: ConductorError) -> JSONResponse:
    """Render a service-raised :class:`ConductorError`."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed with {exc.code}: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected with {exc.code} ({exc.status_code})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields."""
    logger.debug(f"Validation failed for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "err": True,
            "errMsg": CONDUCTOR_ERRORS["err1"],
            "errCode": "err1",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "err": True,
            "errMsg": CONDUCTOR_ERRORS["err6"],
            "errCode": "err6",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ConductorError, conductor_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")

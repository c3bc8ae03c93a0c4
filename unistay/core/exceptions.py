# =============================================================================
# File: unistay/core/exceptions.py
# Description: Exception handlers for FastAPI application
# =============================================================================

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette import status
from starlette.responses import JSONResponse

from unistay.core.fastapi_types import FastAPI
from unistay.common.exceptions.exceptions import (
    UniStayException,
    AuthenticationError,
    PermissionError,
    ResourceNotFoundError,
    ConflictError,
    DomainError,
    ValidationError as DomainValidationError,
    OperationFailedError,
)

logger = logging.getLogger("unistay.exceptions")

# Returned for every server-side failure; details stay in the logs
GENERIC_ERROR_MESSAGE = "An error occurred while processing the chat request."

# Checked in order, first match wins
_STATUS_BY_ERROR = (
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionError, status.HTTP_403_FORBIDDEN),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (DomainError, status.HTTP_400_BAD_REQUEST),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: UniStayException) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application"""

    app.add_exception_handler(UniStayException, unistay_exception_handler)
    app.add_exception_handler(ValidationError, model_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered")


async def unistay_exception_handler(request: Request, exc: UniStayException) -> JSONResponse:
    """Map domain errors to HTTP status codes"""
    status_code = status_for(exc)

    if status_code >= 500 or isinstance(exc, OperationFailedError):
        cause = exc.__cause__
        logger.error(
            f"{type(exc).__name__} on path {request.url.path}: {exc.message}"
            + (f" (caused by {type(cause).__name__}: {cause})" if cause else "")
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(exc.code, GENERIC_ERROR_MESSAGE),
        )

    logger.info(f"{type(exc).__name__} on path {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message))


async def model_validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Command construction rejected a value the request model let through"""
    logger.warning(f"Command validation error on path {request.url.path}: {exc.errors()}")
    messages = "; ".join(str(error["msg"]) for error in exc.errors())
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("validation_error", messages),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors"""
    logger.warning(f"Validation error on path {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        error_dict = {
            "loc": error["loc"],
            "msg": error["msg"],
            "type": error["type"],
        }

        # ctx may hold exception instances, which are not JSON serializable
        if "ctx" in error:
            error_dict["ctx"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in error["ctx"].items()
            }

        errors.append(error_dict)

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general unhandled exceptions"""
    logger.error(f"Unhandled exception on path {request.url.path}: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal_error", GENERIC_ERROR_MESSAGE),
    )

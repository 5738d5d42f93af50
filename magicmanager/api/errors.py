"""Exception handlers that render every failure as an ErrorResponse body."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from magicmanager.models.errors import (
    GENERIC_ERROR_MESSAGE,
    AppError,
    ErrorKind,
    ErrorResponse,
    validation_details,
)

logger = logging.getLogger(__name__)


def _json_error(body: ErrorResponse, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        # Upstream text and codes stay in the log
        logger.warning(
            "REQUEST_FAILED_UPSTREAM",
            extra={
                "path": request.url.path,
                "kind": exc.kind.value,
                "error": exc.message,
                "detail": exc.detail,
            },
        )
        return _json_error(ErrorResponse(error=GENERIC_ERROR_MESSAGE, kind=exc.kind), 500)
    return _json_error(exc.to_response(), exc.status_code)


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    body = ErrorResponse(
        error="Invalid request parameters",
        kind=ErrorKind.INVALID_INPUT,
        details=validation_details(exc.errors()),
    )
    return _json_error(body, 400)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    # Full detail goes to the log only
    logger.exception("UNHANDLED_ERROR", extra={"path": request.url.path})
    return _json_error(ErrorResponse(error=GENERIC_ERROR_MESSAGE, kind=ErrorKind.UNKNOWN), 500)


def register_error_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers on the app."""
    app.add_exception_handler(AppError, handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, handle_request_validation  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, handle_unexpected)

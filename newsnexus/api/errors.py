"""Exception handlers producing the ``{"error": {...}}`` body."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newsnexus.core.exceptions import AppError, AuthenticationError
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_error_response

LOGGER = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """First error message, without pydantic's "Value error, " prefix."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    ctx_error = (first.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log = LOGGER.error if exc.status_code >= 500 else LOGGER.info
    log(
        f"{exc.code}: {exc.message}",
        extra={"path": request.url.path, "status": exc.status_code},
        exc_info=exc.original_error if exc.status_code >= 500 else None,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(
            code=exc.code,
            message=exc.message,
            status=exc.status_code,
            details=exc.details,
            request=request,
        ),
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=create_error_response(
            code="VALIDATION_ERROR",
            message=_validation_message(exc),
            status=status.HTTP_400_BAD_REQUEST,
            details=[
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()
            ],
            request=request,
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error(
        f"Unhandled error on {request.url.path}",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=create_error_response(
            code="INTERNAL_ERROR",
            message="Internal server error",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request=request,
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from egx_advisor.exceptions import (
    AppError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)

logger = structlog.get_logger()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "message": message})


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    return _error_response(500, exc.code, exc.message)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(404, exc.code, exc.message)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, exc.code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies get the same 400 shape as service-level validation."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error_response(400, "VALIDATION_ERROR", message)


async def service_unavailable_handler(
    request: Request, exc: ServiceUnavailableError
) -> JSONResponse:
    logger.warning("service_unavailable", path=request.url.path, error=exc.message)
    return _error_response(503, exc.code, exc.message)


def register_exception_handlers(app):
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ServiceUnavailableError, service_unavailable_handler)
    app.add_exception_handler(AppError, app_error_handler)

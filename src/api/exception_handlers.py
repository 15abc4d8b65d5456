"""Exception handlers for the FastAPI application.

Every failure leaves the service as a ``{status: false, message, error}``
envelope. Service errors are mapped by kind; internal causes are logged and
never echoed to the client.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.schemas.common import envelope
from core.exceptions import AppException, ErrorCode
from domain.services.errors import ServiceError, ServiceErrorKind

logger = structlog.get_logger()

INTERNAL_MESSAGE = "An unexpected error occurred"

SERVICE_ERROR_RESPONSES: dict[ServiceErrorKind, tuple[int, str]] = {
    ServiceErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "Validation failed"),
    ServiceErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Resource not found"),
    ServiceErrorKind.DUPLICATE: (status.HTTP_409_CONFLICT, "Resource already exists"),
    ServiceErrorKind.UNAUTHORIZED: (
        status.HTTP_403_FORBIDDEN,
        "You don't have permission to perform this action",
    ),
    ServiceErrorKind.INTERNAL: (status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_MESSAGE),
}


def service_error_response(exc: ServiceError) -> JSONResponse:
    """Translate a service error into its HTTP status and envelope."""
    status_code, message = SERVICE_ERROR_RESPONSES[exc.kind]
    error: Any = None
    if exc.kind is ServiceErrorKind.VALIDATION:
        error = [violation.to_dict() for violation in exc.violations]
    return JSONResponse(
        status_code=status_code,
        content=envelope(False, message=message, error=error),
    )


def request_validation_details(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten request-shape failures into ``{field, message}`` items.

    The leading location part (``body``, ``query``, ``path``) is dropped.
    """
    details = []
    for error in exc.errors():
        location = [str(part) for part in error["loc"]]
        if len(location) > 1 and location[0] in ("body", "query", "path", "header"):
            location = location[1:]
        details.append({"field": ".".join(location), "message": error["msg"]})
    return details


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app."""

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Handle failures raised by domain services."""
        if exc.kind is ServiceErrorKind.INTERNAL:
            logger.error(
                "service_internal_error",
                operation=exc.operation,
                service=exc.service,
                error=str(exc),
            )
        else:
            logger.info(
                "service_error",
                kind=exc.kind.value,
                operation=exc.operation,
                service=exc.service,
            )
        return service_error_response(exc)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle authentication and authorization failures."""
        logger.warning(
            "app_exception",
            error_code=exc.error_code.value,
            message=exc.message,
        )
        error: dict[str, Any] = {"code": exc.error_code.value}
        if exc.details is not None:
            error["details"] = exc.details
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(False, message=exc.message, error=error),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions from FastAPI/Starlette."""
        return JSONResponse(
            status_code=exc.status_code,
            content=envelope(False, message=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies, unknown enum values and bad parameters."""
        details = request_validation_details(exc)
        logger.info("invalid_request", errors=details)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=envelope(False, message="Invalid request body", error=details),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            request_id=request_id,
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=envelope(
                False,
                message=INTERNAL_MESSAGE,
                error={"code": ErrorCode.INTERNAL_ERROR.value, "request_id": request_id},
            ),
        )

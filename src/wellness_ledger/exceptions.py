"""
Ledger error taxonomy and FastAPI exception handlers
Standardized error response format: { code, message, status_code, details?, request_id }
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from typing import Optional, Dict, Any

from .logging_config import get_request_id

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for minutes-accounting and payout errors"""

    code = "LEDGER_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(LedgerError):
    """A referenced company, specialist, booking, plan or payout request does not exist"""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(LedgerError):
    """The requested transition is not allowed from the record's current state"""

    code = "INVALID_STATE"
    status_code = status.HTTP_409_CONFLICT


class ComputationGuardError(LedgerError):
    """Rejected input to a money or minutes calculation"""

    code = "COMPUTATION_GUARD"
    status_code = status.HTTP_400_BAD_REQUEST


class ErrorResponse:
    """
    Error body shared by every handler

    Schema: { code, message, status_code, details?, request_id }
    """

    @staticmethod
    def create(
        message: str,
        code: str,
        status_code: int,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> dict:
        if request_id is None:
            request_id = get_request_id()

        response = {
            "code": code,
            "message": message,
            "status_code": status_code,
        }
        if request_id:
            response["request_id"] = request_id
        if details:
            response["details"] = details
        return response


async def ledger_exception_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Translate domain errors into user-facing rejections"""
    error_response = ErrorResponse.create(
        message=exc.message,
        code=exc.code,
        status_code=exc.status_code,
        details=exc.details,
    )

    logger.warning(
        f"{exc.code}: {exc.message}",
        extra={"path": request.url.path}
    )

    return JSONResponse(status_code=exc.status_code, content=error_response)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing and framework HTTP errors in the standard error body"""
    error_code_map = {
        400: "BAD_REQUEST",
        401: "AUTH_ERROR",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        500: "INTERNAL_ERROR",
    }
    error_code = error_code_map.get(exc.status_code, "HTTP_ERROR")
    error_message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code} error"

    logger.warning(f"HTTP {exc.status_code}: {exc.detail}", extra={"path": request.url.path})

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse.create(message=error_message, code=error_code, status_code=exc.status_code),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query validation failures (422)"""
    errors = exc.errors()
    detail = "; ".join(f"{err['loc']}: {err['msg']}" for err in errors)

    logger.warning(f"Validation error: {detail}", extra={"path": request.url.path})

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse.create(
            message=f"Validation error: {detail}",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in errors]},
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; exception text is only exposed in dev"""
    from .config import config

    error_message = "Internal server error"
    error_details = None
    if config.is_dev:
        error_message = f"Internal server error: {str(exc)}"
        error_details = {"exception_type": type(exc).__name__}

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True, extra={"path": request.url.path})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse.create(
            message=error_message,
            code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=error_details,
        ),
    )

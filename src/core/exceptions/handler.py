"""
Centralized error handling.
Provides consistent error responses, logging, and HTTP status codes across all routes.
"""

import traceback
from typing import Dict, Any, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime

from src.core.logger.logger import get_logger
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class ServiceErrorCode:
    """Standard error codes for services"""

    # Validation
    INVALID_INPUT = "INVALID_INPUT"

    # Authentication
    INVALID_SIGNATURE = "INVALID_SIGNATURE"

    # Persistence
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_WALLET = "DUPLICATE_WALLET"
    STORE_ERROR = "STORE_ERROR"

    # System
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Client input defects the original service reported as server errors
LEGACY_SERVER_ERROR_CODES = {ServiceErrorCode.INVALID_INPUT, ServiceErrorCode.INVALID_SIGNATURE}


class ServiceError(Exception):
    """
    Standardized service error for internal use.
    Gets converted to proper HTTP response by error handler.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.context = context or {}
        super().__init__(message)


def resolve_status_code(error_code: str, status_code: int) -> int:
    """Apply the legacy status mapping when it is switched on."""
    if settings.LEGACY_ERROR_STATUS and error_code in LEGACY_SERVER_ERROR_CODES:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status_code


class ErrorResponseBuilder:
    """Builds standardized error responses"""

    @staticmethod
    def build_error_response(
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build standardized error response"""

        response = {
            "success": False,
            "error": {
                "code": error_code,
                "message": message,
                "timestamp": datetime.utcnow().isoformat() + "Z"
            }
        }

        if details:
            response["error"]["details"] = details

        if request_id:
            response["error"]["request_id"] = request_id

        return response

    @staticmethod
    def build_validation_error_response(
        validation_errors: list,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build validation error response"""

        messages = ", ".join(f"{e['field']}: {e['message']}" for e in validation_errors)
        return ErrorResponseBuilder.build_error_response(
            error_code=ServiceErrorCode.INVALID_INPUT,
            message=f"Validation error: {messages}",
            details={
                "validation_errors": validation_errors
            },
            request_id=request_id
        )


def _request_id(request: Request) -> str:
    """Id assigned by the request logging middleware, else the client header"""
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "unknown")


class GlobalErrorHandler:
    """Global error handler for all application errors"""

    @staticmethod
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """Handle ServiceError exceptions"""

        request_id = _request_id(request)
        status_code = resolve_status_code(exc.code, exc.status_code)

        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Service error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "status_code": status_code,
                "details": exc.details,
                "context": exc.context,
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method
            }
        )

        response = ErrorResponseBuilder.build_error_response(
            error_code=exc.code,
            message=exc.message,
            details=exc.details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=status_code,
            content=response
        )

    @staticmethod
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTPException (unknown routes, wrong methods) with standardized format"""

        request_id = _request_id(request)

        if exc.status_code == 404:
            error_code = ServiceErrorCode.NOT_FOUND
        elif exc.status_code < 500:
            error_code = ServiceErrorCode.INVALID_INPUT
        else:
            error_code = ServiceErrorCode.INTERNAL_ERROR

        logger.warning(
            f"HTTP exception: {exc.status_code}",
            extra={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method
            }
        )

        response = ErrorResponseBuilder.build_error_response(
            error_code=error_code,
            message=str(exc.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=response,
            headers=getattr(exc, "headers", None)
        )

    @staticmethod
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle body parsing errors raised before a route runs (malformed JSON, missing body)"""

        request_id = _request_id(request)

        validation_errors = []
        for error in exc.errors():
            # Drop the leading "body" location segment
            loc = [str(part) for part in error['loc'] if part != "body"]
            validation_errors.append({
                'field': '.'.join(loc) or 'body',
                'message': error['msg']
            })

        logger.warning(
            f"Validation error: {len(validation_errors)} errors",
            extra={
                "validation_errors": validation_errors,
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method
            }
        )

        response = ErrorResponseBuilder.build_validation_error_response(
            validation_errors=validation_errors,
            request_id=request_id
        )

        return JSONResponse(
            status_code=resolve_status_code(ServiceErrorCode.INVALID_INPUT, status.HTTP_400_BAD_REQUEST),
            content=response
        )

    @staticmethod
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions"""

        request_id = _request_id(request)

        # Log full traceback for debugging
        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={
                "error_type": type(exc).__name__,
                "error_message": str(exc),
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method
            },
            exc_info=True
        )

        # Never expose internal errors in production
        if settings.DEBUG:
            message = f"Internal error: {str(exc)}"
            details = {"traceback": traceback.format_exc()}
        else:
            message = "An unexpected error occurred. Please try again."
            details = {}

        response = ErrorResponseBuilder.build_error_response(
            error_code=ServiceErrorCode.INTERNAL_ERROR,
            message=message,
            details=details,
            request_id=request_id
        )

        return JSONResponse(
            status_code=500,
            content=response
        )

import time
import json
import traceback
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from src.core.logger.logger import logger, get_error_access_logger
from src.infra.config.settings import settings


def format_combined_log_line(request: Request, status_code: int, content_length: Optional[str]) -> str:
    """Render one request in the Apache/NCSA combined log format."""
    client_host = request.client.host if request.client else "-"
    timestamp = datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S %z")
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    http_version = request.scope.get("http_version", "1.1")
    referer = request.headers.get("referer", "-")
    user_agent = request.headers.get("user-agent", "-")
    return (
        f'{client_host} - - [{timestamp}] "{request.method} {target} HTTP/{http_version}" '
        f'{status_code} {content_length or "-"} "{referer}" "{user_agent}"'
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request as JSON and appends failed ones (status >= 400) to the error access log."""

    def __init__(self, app: ASGIApp, error_log_path: Optional[str] = None):
        super().__init__(app)
        self.error_access_logger = get_error_access_logger(error_log_path or settings.ERROR_LOG_PATH)

    async def dispatch(self, request: Request, call_next) -> Response:
        # Start timing
        start_time = time.time()

        # Get or generate correlation ID
        correlation_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = correlation_id

        # Create log context
        log_context = {
            "request_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }

        try:
            # Process request
            response = await call_next(request)

            # Calculate duration
            duration_ms = round((time.time() - start_time) * 1000, 2)

            log_context.update({
                "status_code": response.status_code,
                "duration_ms": duration_ms
            })

            # Add custom header
            response.headers["X-Request-ID"] = correlation_id

            logger.info(json.dumps(log_context))

            if response.status_code >= 400:
                self.error_access_logger.info(
                    format_combined_log_line(request, response.status_code, response.headers.get("content-length"))
                )

            return response

        except Exception as e:
            # Log error with stack trace
            duration_ms = round((time.time() - start_time) * 1000, 2)
            log_context.update({
                "error": str(e),
                "error_type": e.__class__.__name__,
                "stack_trace": traceback.format_exc(),
                "duration_ms": duration_ms
            })
            logger.error(json.dumps(log_context))
            self.error_access_logger.info(format_combined_log_line(request, 500, None))
            raise

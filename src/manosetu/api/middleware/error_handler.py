"""
Error Handler Middleware

Provides consistent error handling and response formatting.
Logs errors with correlation IDs for debugging.

Session domain errors are mapped to their HTTP status by an
exception handler; anything else reaching the middleware is a
500 with a sanitized body.
"""

import time
import traceback
from uuid import uuid4

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from manosetu.config.logging_config import get_logger, bind_correlation_id, clear_context
from manosetu.domain.errors import SessionError
from manosetu.infrastructure.metrics import track_http_request
from manosetu.infrastructure.monitoring import capture_exception_with_context

logger = get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.
    
    Provides:
    - Correlation ID tracking for all requests
    - Consistent error response format
    - Error logging and Sentry reporting with context
    - Request count and latency metrics
    """
    
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with error handling."""
        
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
        bind_correlation_id(correlation_id)
        started = time.perf_counter()
        
        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            track_http_request(request.method, response.status_code, time.perf_counter() - started)
            return response
            
        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                error_message=str(e),
                traceback=traceback.format_exc(),
            )
            capture_exception_with_context(
                e,
                correlation_id=correlation_id,
                extra={"path": request.url.path, "method": request.method},
            )
            track_http_request(request.method, 500, time.perf_counter() - started)
            
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "internal_error",
                    "correlation_id": correlation_id,
                    "message": "Server error",
                },
                headers={"X-Correlation-ID": correlation_id},
            )
            
        finally:
            clear_context()


async def session_error_handler(request: Request, exc: SessionError) -> JSONResponse:
    """Map a session domain error to its HTTP response."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "Session request rejected",
        path=request.url.path,
        error=exc.code,
        status_code=exc.status_code,
        error_message=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.code,
            "message": exc.message,
        },
    )

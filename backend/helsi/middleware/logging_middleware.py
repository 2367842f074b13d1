"""
FastAPI middleware for logging API requests.

Uses pure ASGI middleware (not BaseHTTPMiddleware) so file uploads and
other async response types pass through untouched.

Logs method, path, status code and processing time. Request and response
bodies are never read because they carry personal health data.
"""

import logging
import time
from typing import Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Pure ASGI middleware to log all API requests."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        """
        Initialize the logging middleware.

        Args:
            app: The ASGI application
            exclude_paths: Paths that are not logged (e.g., ["/health"])
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/health", "/"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        if path in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_id = id(scope)
        method = scope.get("method", "UNKNOWN")
        client = scope.get("client")
        client_host = client[0] if client else None

        status_code = 0

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        logger.debug(
            f"Request started: {method} {path}",
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "client": client_host,
            }}
        )

        try:
            await self.app(scope, receive, logging_send)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path} - {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                }}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000

        if status_code < 400:
            log_level = logging.INFO
        elif status_code < 500:
            log_level = logging.WARNING
        else:
            log_level = logging.ERROR

        logger.log(
            log_level,
            f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(duration_ms, 2),
            }}
        )

"""Custom middleware for the application."""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = logging.getLogger("staybook.requests")

SLOW_REQUEST_SECONDS = 1.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and response times."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request details and timing.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response: Route response
        """
        start_time = time.perf_counter()

        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        message = (
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s [{request_id}]"
        )
        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(f"SLOW REQUEST: {message}")
        else:
            logger.info(message)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response

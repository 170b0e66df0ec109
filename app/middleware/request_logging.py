"""
Request logging middleware.
Tags every request with a short id and logs its outcome and timing.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a request id and logs method, path, status and duration.
    Requests slower than the threshold are logged as warnings.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 2.0,  # seconds
        enable_detailed_logging: bool = False
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.enable_detailed_logging = enable_detailed_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request through the logging middleware.

        Args:
            request: FastAPI request object
            call_next: Next middleware/handler in chain

        Returns:
            Response object with X-Request-ID and X-Processing-Time headers
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        if self.enable_detailed_logging:
            logger.debug(
                f"Request [{request_id}] {request.method} {request.url.path} "
                f"query={dict(request.query_params)}"
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.perf_counter() - start_time
            logger.error(
                f"Request [{request_id}] {request.method} {request.url.path} "
                f"failed after {processing_time:.3f}s: {exc}"
            )
            raise

        processing_time = time.perf_counter() - start_time
        message = (
            f"[{request_id}] {request.method} {request.url.path} "
            f"{response.status_code} {processing_time:.3f}s"
        )
        if processing_time > self.slow_request_threshold:
            logger.warning(f"Slow request {message}")
        else:
            logger.info(message)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response

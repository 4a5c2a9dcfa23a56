import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)

from src.core.logging import request_id_var

logger = logging.getLogger("api_logger")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, correlated through X-Request-ID."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time: float = time.perf_counter()
        request_id: str = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"{request.method} {request.url.path} | Failed | "
                    f"Time={time.perf_counter() - start_time:.3f}s | Error={e!s}"
                )
                raise

            process_time = time.perf_counter() - start_time
            logger.info(
                f"{request.method} {request.url.path} | Status={response.status_code} | Time={process_time:.3f}s"
            )
        finally:
            request_id_var.reset(token)

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        response.headers["X-Request-ID"] = request_id
        return response

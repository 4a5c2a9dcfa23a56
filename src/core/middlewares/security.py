from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)

DOCS_PATHS = ("/api/docs", "/api/redoc")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach browser hardening headers; the JSON API never serves active content."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path in DOCS_PATHS:
            # Swagger UI and ReDoc load their bundles from jsdelivr
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https:; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"

        return response


class MaxRequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject oversized POST bodies before they reach the moderation pipeline."""

    def __init__(self, app, max_body_size: int = 64 * 1024):
        super().__init__(app)
        self.max_body_size: int = max_body_size

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "POST":
            content_length: str | None = request.headers.get("content-length")
            if content_length and content_length.isdigit() and int(content_length) > self.max_body_size:
                return JSONResponse(
                    status_code=status.HTTP_413_CONTENT_TOO_LARGE,
                    content={
                        "success": False,
                        "type": "PayloadTooLarge",
                        "error": f"Request body exceeds the maximum of {self.max_body_size} bytes.",
                    },
                )

        return await call_next(request)

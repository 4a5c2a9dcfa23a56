from logging import Logger
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from src.core.exception import (
    BaseAppError,
    DuplicateReportError,
    StorageError,
    ValidationError,
)
from src.core.logging import get_logger

logger: Logger = get_logger(__name__)


def init(app: FastAPI):
    def _result(status_code: int, detail: Any, _type: str = "Error", headers: dict | None = None):
        logger.debug({status_code, detail, _type})
        content = {
            "success": False,
            "type": _type,
            "error": detail,
        }
        return JSONResponse(
            status_code=status_code,
            content=content,
            headers=headers or {"X-Error": _type},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_request: Request, exc: HTTPException):
        logger.debug(f"HTTPException handler caught: {type(exc).__name__} - {exc.detail}")
        return _result(exc.status_code, str(exc.detail), headers=exc.headers)  # ty:ignore[invalid-argument-type]

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        messages = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error.get("loc", [])[1:])
            msg = error.get("msg", "Validation error")
            messages.append(f"{field}: {msg}" if field else msg)
        return _result(status.HTTP_400_BAD_REQUEST, "; ".join(messages), "ValidationError")

    @app.exception_handler(ValidationError)
    async def app_validation_error_handler(_request: Request, exc: ValidationError):
        return _result(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message, _type="ValidationError")

    @app.exception_handler(DuplicateReportError)
    async def duplicate_report_handler(_request: Request, exc: DuplicateReportError):
        return _result(status_code=status.HTTP_409_CONFLICT, detail=exc.message, _type="DuplicateReportError")

    @app.exception_handler(StorageError)
    async def storage_error_handler(_request: Request, exc: StorageError):
        return _result(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message, _type="StorageError")

    @app.exception_handler(BaseAppError)
    async def app_exception_handler(_request: Request, exc: BaseAppError):
        logger.debug(f"BaseAppError handler caught: {type(exc).__name__} - {exc.message}")
        return _result(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message, _type=exc.__class__.__name__)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {exc!s}",
            exc_info=True,
            extra={
                "request_path": str(request.url.path),
                "request_method": request.method,
                "exception_type": type(exc).__name__,
            },
        )

        return _result(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "InternalServerError")

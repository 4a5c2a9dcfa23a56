import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger import jsonlogger

from src.core.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(request_id)s] - %(message)s"

# Set by LoggingMiddleware for the duration of a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamps records with the id of the request being served, or "-" outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["environment"] = settings.ENVIRONMENT
        log_record["app"] = settings.PROJECT_NAME


def _root_level() -> int:
    if settings.LOG_LEVEL:
        return getattr(logging, settings.LOG_LEVEL)
    return logging.WARNING if settings.is_production else logging.INFO


def configure_logging():
    """Configure process-wide logging: JSON in production, plain text elsewhere."""
    log_level = _root_level()

    if settings.is_production:
        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(request_id)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "httpx", "httpcore", "google_genai", "google.genai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    # uvicorn's own handlers would print every line twice
    logging.getLogger("uvicorn.access").handlers = []
    logging.getLogger("uvicorn.error").handlers = []

    logging.getLogger("api_logger").setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    """Module logger. Records propagate to the root handler configured above."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if not settings.is_production else logging.INFO)
    return logger

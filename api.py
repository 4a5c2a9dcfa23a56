import secrets
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, status
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from src.core.config import settings
from src.core.database import AsyncSessionLocal, create_tables
from src.core.handler import init as init_exception_handlers
from src.core.logging import configure_logging, get_logger
from src.core.middlewares.logging import LoggingMiddleware
from src.core.middlewares.ratelimit import InMemoryRateLimitBackend, RedisRateLimitBackend
from src.core.middlewares.security import MaxRequestSizeMiddleware, SecurityHeadersMiddleware
from src.core.services.best_effort import BestEffortWriter
from src.core.services.redis_service import RedisService
from src.core.utils.locks import KeyedLock
from src.modules.health.router import router as health_router
from src.modules.moderation.router import router as moderation_router
from src.modules.moderation.services import ExternalClassifier, ModerationService
from src.modules.reports.escalation import EscalationStateMachine
from src.modules.reports.router import router as reports_router

configure_logging()
logger = get_logger(__name__)

security: HTTPBasic = HTTPBasic(auto_error=False)

environment: str = settings.ENVIRONMENT


def check_swagger_auth(
    credentials: HTTPBasicCredentials | None = Depends(dependency=security),
):
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": 'Basic realm="Swagger UI"'},
        )

    correct_username: bool = secrets.compare_digest(credentials.username, settings.SWAGGER_USER)
    correct_password: bool = secrets.compare_digest(credentials.password, settings.SWAGGER_PASSWORD)

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": 'Basic realm="Swagger UI"'},
        )
    return True


middleware_list: list[Middleware] = [
    Middleware(SecurityHeadersMiddleware),  # ty:ignore[invalid-argument-type]
    Middleware(MaxRequestSizeMiddleware, max_body_size=settings.MAX_REQUEST_SIZE_KB * 1024),  # ty:ignore[invalid-argument-type]
    Middleware(LoggingMiddleware),  # ty:ignore[invalid-argument-type]
]

if settings.BACKEND_CORS_ORIGINS:
    middleware_list.insert(
        0,
        Middleware(
            CORSMiddleware,  # ty:ignore[invalid-argument-type]
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    )

openapi_tags = [
    {
        "name": "Moderation",
        "description": (
            "Screens story titles, creature descriptions and comments. "
            "Combines a profanity dictionary, platform rules and an external AI classifier."
        ),
    },
    {
        "name": "Reports",
        "description": "User reports. Content is hidden after 3 pending reports and blocked after 5 by default.",
    },
    {"name": "Health", "description": "Health Check Endpoint"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Application lifespan events.

    Startup:
        - Build the per-process moderation pipeline, report locks and rate limiter
    Shutdown:
        - Flush pending moderation log writes and close Redis
    """
    logger.info("Application startup: Initializing resources...")

    if settings.DATABASE_AUTO_CREATE:
        await create_tables()
        logger.info("Database tables ensured")

    redis: RedisService | None = None
    if settings.RATE_LIMIT_BACKEND == "redis":
        redis = RedisService()
        app.state.rate_limit_backend = RedisRateLimitBackend(redis)
    else:
        app.state.rate_limit_backend = InMemoryRateLimitBackend()

    log_writer = BestEffortWriter(AsyncSessionLocal)
    app.state.log_writer = log_writer
    app.state.moderation_service = ModerationService(
        external_classifier=ExternalClassifier.from_settings(),
        log_writer=log_writer,
    )
    app.state.escalation = EscalationStateMachine(
        hide_threshold=settings.REPORT_HIDE_THRESHOLD,
        block_threshold=settings.REPORT_BLOCK_THRESHOLD,
    )
    app.state.report_locks = KeyedLock()
    logger.info(
        f"Moderation ready (rate limit backend: {settings.RATE_LIMIT_BACKEND}, "
        f"thresholds hide={settings.REPORT_HIDE_THRESHOLD} block={settings.REPORT_BLOCK_THRESHOLD})"
    )

    yield

    logger.info("Application shutdown: Cleaning up resources...")
    await log_writer.drain()
    if redis is not None:
        await redis.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Content moderation and report escalation API",
    version="1.0",
    middleware=middleware_list,
    openapi_tags=openapi_tags,
    lifespan=lifespan,
    docs_url=None if environment == "production" else "/api/docs",
    redoc_url=None if environment == "production" else "/api/redoc",
    openapi_url=None if environment == "production" else "/api/openapi.json",
)

init_exception_handlers(app)

# In production the docs stay reachable, but only behind basic auth.
docs_router = APIRouter(include_in_schema=False, dependencies=[Depends(check_swagger_auth)])


@docs_router.get("/api/docs")
async def get_swagger_documentation():
    return get_swagger_ui_html(openapi_url="/api/openapi.json", title=f"{app.title} - Swagger UI")


@docs_router.get("/api/redoc")
async def get_redoc_documentation():
    return get_redoc_html(openapi_url="/api/openapi.json", title=f"{app.title} - ReDoc")


@docs_router.get("/api/openapi.json")
async def get_openapi_schema():
    return app.openapi()


if environment == "production":
    app.include_router(docs_router)


# API v1 router
api_v1_router = APIRouter(prefix=settings.API_V1_STR)
api_v1_router.include_router(router=moderation_router, tags=["Moderation"])
api_v1_router.include_router(router=reports_router, prefix="/reports", tags=["Reports"])

app.include_router(api_v1_router)
app.include_router(router=health_router)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.cache import client as cache_client
from src.config.logging_config import configure_logging
from src.config.settings import settings
from src.database import client as db_client
from src.features.auth.router import router as auth_router
from src.shared.errors import ErrorCategory, ErrorCode, ServiceError

configure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

# Status and public detail per category; None exposes the error message
_ERROR_RESPONSES: dict[ErrorCategory, tuple[int, str | None]] = {
    ErrorCategory.AUTHENTICATION: (status.HTTP_401_UNAUTHORIZED, "Invalid or expired token"),
    ErrorCategory.CONFLICT: (status.HTTP_409_CONFLICT, "User already exists"),
    ErrorCategory.VALIDATION: (status.HTTP_400_BAD_REQUEST, None),
    ErrorCategory.INFRASTRUCTURE: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
}

# Codes whose message is safe to show as-is
_PUBLIC_CODES = {ErrorCode.INVALID_CREDENTIALS, ErrorCode.OAUTH_EXCHANGE_FAILED}


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map domain errors to HTTP responses without leaking internals."""
    status_code, public_detail = _ERROR_RESPONSES[exc.category]
    if exc.code in _PUBLIC_CODES:
        public_detail = exc.message

    if exc.category is ErrorCategory.INFRASTRUCTURE:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": public_detail or exc.message, "code": exc.code.value},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    await db_client.init_db()
    if settings.postgres_create_schema:
        await db_client.create_schema()
    await cache_client.init_redis()
    yield
    # Shutdown
    await cache_client.close_redis()
    await db_client.close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)

app.add_exception_handler(ServiceError, service_error_handler)

# Router Registration
routers: list[APIRouter] = [
    auth_router,
]

for router in routers:
    app.include_router(router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": settings.app_name, "status": "running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}

"""
GymBuddy message service.

Sits between the chat transport (Telegram, WhatsApp, ...) and the
scheduling backend: the transport posts raw messages here, this service
decides what they mean and applies availability changes.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gymbuddy.api.routes import health, messages
from gymbuddy.config import settings
from gymbuddy.core.scheduling.client import get_scheduling_client
from gymbuddy.infra.claude import ClaudeClient

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Per-request chatter from these is noise next to routing logs
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "anthropic")


def setup_logging() -> None:
    """DEBUG with settings.debug, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def log_configuration_warnings() -> None:
    """Warn about settings that degrade the bot without stopping it."""
    if not settings.chat_enabled:
        logger.warning("ANTHROPIC_API_KEY not set - general chat uses fixed replies")
    if not settings.user_directory_map:
        logger.warning("USER_DIRECTORY is empty - every user will be unknown")


async def close_clients() -> None:
    """Close the outbound HTTP clients created during the app's life."""
    await get_scheduling_client().close()
    if ClaudeClient._instance is not None:
        await ClaudeClient._instance.close()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info(
        f"Starting {settings.app_name} ({settings.app_env}), "
        f"scheduling API at {settings.scheduling_api_url}"
    )
    health.set_start_time()
    log_configuration_warnings()

    yield

    await close_clients()
    logger.info(f"{settings.app_name} stopped")


app = FastAPI(
    title="GymBuddy Message API",
    description="""
    Understands GymBuddy chat messages and keeps workout availability in sync.

    - `POST /messages` classifies a message, applies the availability change
      through the scheduling API and returns the bot's reply
    - `POST /messages/classify` shows the routing decision without side effects
    - Anything that is not a scheduling request is answered by the chat fallback
    """,
    version=health.VERSION,
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without non-serializable ctx values."""
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation error", "detail": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            # Only development shows the exception text
            "detail": str(exc) if settings.is_development else "Internal server error",
        },
    )


@app.middleware("http")
async def log_request_timing(request: Request, call_next):
    """Log each request's duration at DEBUG."""
    start_time = time.time()
    try:
        return await call_next(request)
    finally:
        logger.debug(
            f"{request.method} {request.url.path} took {time.time() - start_time:.3f}s"
        )


app.include_router(health.router)
app.include_router(messages.router)


@app.get("/", tags=["Root"])
async def root() -> dict:
    """Service name, version and the main endpoints."""
    return {
        "name": settings.app_name,
        "version": health.VERSION,
        "status": "running",
        "environment": settings.app_env,
        "endpoints": {
            "messages": "/messages",
            "classify": "/messages/classify",
            "stats": "/messages/stats",
            "health": "/health",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gymbuddy.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )

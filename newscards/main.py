import logging
import sys

import structlog
from pydantic import ValidationError

from .config import get_settings


def load_settings():
    """Missing credentials (database URL, Gemini key, Twitter key) stop the process."""
    try:
        return get_settings()
    except ValidationError as e:
        missing = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        structlog.get_logger(__name__).error("configuration_invalid", fields=missing)
        raise SystemExit(1)


settings = load_settings()

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from .api.dependencies import get_pipeline  # noqa: E402
from .api.v1.router import api_router  # noqa: E402
from .core.database import create_tables  # noqa: E402
from .news.services.scheduler import create_scheduler  # noqa: E402
from .news.services.source_registry import source_registry  # noqa: E402


def apply_logging_preferences():
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)


logging.basicConfig(
    stream=sys.stdout,
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s"
)

apply_logging_preferences()

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("newscards_starting", version="0.1.0")
    try:
        create_tables()
        logger.info("database_tables_ready")
    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    source_registry.subscribe()
    source_registry.reload()

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = create_scheduler(get_pipeline(), settings)
        scheduler.start()
        logger.info("scheduler_started")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
    source_registry.unsubscribe()
    logger.info("newscards_stopped")


def create_application() -> FastAPI:
    app = FastAPI(
        title="NewsCards",
        description="Aggregates RSS feeds and Twitter handles into AI-rewritten Telugu news cards",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            }
        )

    # Health check at root
    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    app.include_router(api_router, prefix="/api")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newscards.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )

"""
FastAPI application entry point for the Exam Package Ingestion service.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError

from exam_ingestion import __version__
from exam_ingestion.api.dependencies import get_store
from exam_ingestion.api.error_handlers import EXCEPTION_HANDLERS
from exam_ingestion.api.middleware import RequestTracingMiddleware
from exam_ingestion.api.routes import router
from exam_ingestion.config import settings
from exam_ingestion.logging_config import configure_logging
from exam_ingestion.persistence.database import Database

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify the database on startup, release the pool on shutdown."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        structural_engine=settings.STRUCTURAL_ENGINE,
        contract_schema_version=settings.CONTRACT_SCHEMA_VERSION,
    )

    try:
        store = get_store()
        store.check_connection()
        logger.info("Database connection successful")
        if settings.CREATE_SCHEMA_ON_STARTUP:
            store.create_schema()
    except SQLAlchemyError as e:
        logger.error("Database connection failed", exc_info=e)

    if not settings.ACCESS_TOKENS:
        logger.warning("No access tokens configured; every ingestion will be rejected with 401")

    logger.info("Application startup complete")
    yield

    logger.info("Application shutdown")
    Database.dispose()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description="Validates exam packages and commits them atomically to the exam content store",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

# Register exception handlers
for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router, tags=["exam-packages"])

# Prometheus metrics instrumentation
if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Root endpoint with API documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "contract_schema_version": settings.CONTRACT_SCHEMA_VERSION,
        "docs": "/docs",
        "health": "/health",
        "schema": "/schema",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "exam_ingestion.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )

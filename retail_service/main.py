# retail_service/main.py
"""
Retail Service - Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from sqlalchemy import text
import logging

from retail_service import __version__
from retail_service.common_logging import setup_logging
from retail_service.common_instrumentation import setup_opentelemetry, instrument_fastapi, instrument_sqlalchemy
from retail_service.api import catalog_routes, payment_routes, routes
from retail_service.db import database
from retail_service.errors import RetailError
from retail_service.config import settings

setup_logging(
    service_name=settings.service_name,
    log_level=settings.log_level,
    log_format=settings.log_format
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info(f"Starting {settings.service_name}")
    logger.info(f"Environment: {settings.environment}")

    try:
        engine = database.init_database(settings.database_url, echo=settings.database_echo)
        database.create_tables()
        logger.info("Database initialized successfully")

        if settings.otel_enabled:
            instrument_sqlalchemy(engine)

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if settings.otel_enabled:
        setup_opentelemetry(
            service_name=settings.otel_service_name or settings.service_name,
            otlp_endpoint=settings.otel_endpoint,
            enabled=settings.otel_enabled
        )

    logger.info(f"{settings.service_name} started successfully")

    yield

    logger.info(f"Shutting down {settings.service_name}")
    if database.engine is not None:
        database.engine.dispose()


app = FastAPI(
    title="Retail Service",
    description="Catalog, customers, orders and payments for a retail shop",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.otel_enabled:
    instrument_fastapi(app)

app.include_router(routes.router)
app.include_router(catalog_routes.router)
app.include_router(payment_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint (liveness probe)"""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/ready")
def readiness_check():
    """Readiness check endpoint (readiness probe)"""
    try:
        db = database.SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()

        return {
            "status": "ready",
            "service": settings.service_name,
            "database": "connected",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.service_name,
                "database": "disconnected",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.service_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "ready": "/ready"
    }


@app.exception_handler(RetailError)
async def retail_error_handler(request: Request, exc: RetailError):
    """Map domain and storage errors to their HTTP status"""
    logger.warning(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "type": exc.__class__.__name__
        }
    )


def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "retail_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()

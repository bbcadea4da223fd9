"""
FastAPI application for the shop ledger: stock valuation, batch/serial
tracking and GST reports.

To run: uvicorn shopledger.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopledger.api.v1 import api_router
from shopledger.audit import audit_recorder
from shopledger.core.config import settings
from shopledger.core.database import check_db_connection, close_db, init_db
from shopledger.error_handlers import register_exception_handlers
from shopledger.logging_config import get_logger, setup_logging
from shopledger.middleware import RequestLoggingMiddleware

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    setup_logging(
        settings.log_level,
        settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    if settings.debug:
        # Use Alembic migrations outside development
        logger.info("Debug mode: creating missing database tables")
        init_db()

    audit_recorder.start()
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    audit_recorder.stop()
    close_db()
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Shop Ledger - weighted-average stock valuation, batch & serial tracking, GST reports",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/")
    def root():
        """Root endpoint with API information."""
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
            "api_v1": "/api/v1"
        }

    @app.get("/health")
    def health_check():
        """Health check including database connectivity."""
        database_ok = check_db_connection()
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": "connected" if database_ok else "unavailable",
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shopledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi import Request as FastAPIRequest
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flightpoints.api import api_router
from flightpoints.core.config import get_settings
from flightpoints.core.exceptions import ConfigurationError, StorageError
from flightpoints.db import close_adapter, init_adapter
from flightpoints.db.adapter import StorageAdapter
from flightpoints.schemas.common import HealthResponse
from flightpoints.services.retention import RetentionScheduler

logger = logging.getLogger(__name__)


def create_app(adapter: StorageAdapter | None = None) -> FastAPI:
    """Build the API application.

    When ``adapter`` is given it is used as-is (and left open on shutdown);
    otherwise the process adapter is created from settings.
    """
    settings = get_settings()

    # Module loggers (cleanup, scheduler, searches) emit INFO diagnostics
    logging.getLogger("flightpoints").setLevel(logging.INFO)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        storage = adapter if adapter is not None else init_adapter(settings)
        storage.initialize()
        application.state.storage = storage

        scheduler = RetentionScheduler(storage)
        await scheduler.start()
        application.state.scheduler = scheduler
        logger.info("Cache TTL: %d days", storage.cache_duration_days)
        try:
            yield
        finally:
            await scheduler.stop()
            if adapter is None:
                close_adapter()

    application = FastAPI(
        title="Flight Points Search",
        description="Award-seat availability across airline loyalty programs, cached by route.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url=None if settings.is_production else "/openapi.json",
    )

    @application.exception_handler(StorageError)
    async def storage_exception_handler(request: FastAPIRequest, exc: StorageError) -> JSONResponse:
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    @application.exception_handler(ConfigurationError)
    async def configuration_exception_handler(
        request: FastAPIRequest, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Service not initialized"})

    @application.exception_handler(Exception)
    async def global_exception_handler(request: FastAPIRequest, exc: Exception) -> JSONResponse:
        """Catch unhandled exceptions and return a generic 500 response."""
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        content = {"detail": "Internal server error"}
        if not settings.is_production:
            content["debug"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    application.include_router(api_router, prefix="/api")

    @application.get("/health", response_model=HealthResponse)
    def health_check() -> HealthResponse:
        return HealthResponse(status="ok")

    return application


def run() -> None:
    """Serve the API with uvicorn on the configured backend port."""
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    uvicorn.run(
        "flightpoints.main:create_app",
        factory=True,
        host="0.0.0.0",  # nosec B104
        port=settings.backend_port,
    )


if __name__ == "__main__":
    run()

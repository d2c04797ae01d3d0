"""
FastAPI application entry point.
Sets up the API with lifespan events for startup validation.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from uploader import __version__
from uploader.api.dependencies import DownloadHook
from uploader.api.router import api_router
from uploader.config import check_storage_settings, settings
from uploader.middleware.metrics_middleware import MetricsMiddleware
from uploader.utils.logging import configure_logging

logger = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the process must not start serving."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: configure logging, validate storage settings
    """
    configure_logging('uploader-api', settings.log_level)

    check = check_storage_settings(settings)
    if not check.ok:
        message = f"Missing storage settings: {', '.join(check.missing)}"
        # Refuse to serve in production; elsewhere keep running so /health can report it
        if settings.environment == "production":
            raise StartupError(message)
        logger.warning(message)

    yield


def create_app(on_download: Optional[DownloadHook] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        on_download: Optional callback invoked with the object key after
            each successful download

    Returns:
        Configured FastAPI app
    """
    application = FastAPI(
        title="Direct Upload API",
        description="Presigned S3 credentials for direct uploads and downloads",
        version=__version__,
        lifespan=lifespan
    )
    application.state.on_download = on_download

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Browsers call this API cross-origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Metrics middleware (must be after CORS to track all requests)
    application.add_middleware(MetricsMiddleware)

    application.include_router(api_router, prefix="/api")

    @application.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Direct Upload API",
            "version": __version__,
            "environment": settings.environment
        }

    @application.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    return application


app = create_app()

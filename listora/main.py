"""
Listora FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from listora import __version__
from listora.config import get_settings
from listora.core.logging_config import setup_logging
from listora.core.sentry_config import init_sentry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle management."""
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} v{__version__} ({settings.app_env.value}, "
        f"eBay {'sandbox' if settings.ebay_sandbox else 'production'})"
    )
    yield
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """Application factory: creates and configures the FastAPI instance."""
    settings = get_settings()

    # 1. Configure structured logging (before anything else)
    setup_logging(
        app_env=settings.app_env,
        log_level=settings.log_level,
        log_format=settings.log_format,
    )

    # 2. Initialize Sentry (before app creation so ASGI integration hooks in)
    init_sentry(
        dsn=settings.sentry_dsn,
        app_env=settings.app_env,
        app_version=__version__,
        traces_sample_rate=settings.sentry_traces_sample_rate,
    )

    openapi_tags = [
        {
            "name": "Publishing",
            "description": "Publish generated product content to eBay, or build an Amazon "
                           "Seller Central template for upload.",
        },
        {
            "name": "eBay",
            "description": "Connect a seller's eBay account and review the listings created for it.",
        },
        {
            "name": "System",
            "description": "Health checks and operational endpoints.",
        },
    ]

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Listora turns AI-generated product content into marketplace listings: "
            "live eBay listings through the Trading API and Amazon flat-file templates."
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        redirect_slashes=False,
    )

    # Register API routers (triggers database module import)
    from listora.api.v1 import ebay, publish

    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": __version__,
            "environment": settings.app_env.value,
        }

    app.include_router(publish.router, prefix="/api/v1")
    app.include_router(ebay.router, prefix="/api/v1")

    # Register global exception handlers (after routers)
    from listora.middleware.exception_handler import register_exception_handlers

    register_exception_handlers(app)

    return app


app = create_app()

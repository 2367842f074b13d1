"""
Helsi - Main FastAPI Application
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .api import (
    profile_router, logs_router, dashboard_router, insights_router, documents_router
)
from .core.logging_config import setup_logging
from .llm import init_llm_provider
from .middleware.logging_middleware import RequestLoggingMiddleware
from .storage import LocalStorage, MemoryStorage, init_repository

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


def _create_storage():
    if settings.storage_type == "memory":
        return MemoryStorage()
    return LocalStorage(settings.local_storage_path)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    init_repository(_create_storage())
    logger.info("Wellness repository initialized")

    provider = init_llm_provider(settings)
    if provider is None:
        logger.info("No LLM API key configured, running in demo mode with local extraction")
    else:
        logger.info(f"LLM provider: {settings.llm_provider} ({provider.model})")

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage: {settings.storage_type} ({settings.local_storage_path})")
    logger.info(f"Log level: {settings.log_level.upper()}")
    logger.info(f"Debug mode: {settings.debug}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Gamified wellness tracker with daily logs, insights and medical document analysis",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(profile_router)
app.include_router(logs_router)
app.include_router(dashboard_router)
app.include_router(insights_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "demo_mode": settings.demo_mode,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "storage": settings.storage_type,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "helsi.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

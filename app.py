"""
Mail Authentication Engine - FastAPI Backend
Main Application Entry Point
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from mailauth.api.dependencies import get_store
from mailauth.api.errors import register_exception_handlers
from mailauth.api.routes import dns, domains, health, known_senders
from mailauth.database.seeds import GLOBAL_KNOWN_SENDERS
from mailauth.logging_config import init_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the FastAPI application with routers and error handlers."""
    app = FastAPI(
        title=settings.app_name,
        description="SPF/DKIM/DMARC discovery, domain verification and known-sender classification",
        version=settings.app_version,
        debug=settings.debug
    )

    # CORS middleware for frontend integration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(dns.router)
    app.include_router(domains.router)
    app.include_router(known_senders.router)

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Application startup tasks."""
        init_logging(settings.log_level, settings.log_file)
        logger.info("Starting %s v%s", settings.app_name, settings.app_version)
        logger.info("Database: %s", settings.database_path)

        if settings.seed_known_senders:
            get_store().seed_global_senders(GLOBAL_KNOWN_SENDERS)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Application shutdown tasks."""
        logger.info("Shutting down %s", settings.app_name)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

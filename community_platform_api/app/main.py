"""
Main entrypoint for the Community Platform API.

This module assembles the FastAPI application: logging, CORS for the
browser client, versioned routers and the startup hook that applies
database migrations and seeds demo data.  Run it with uvicorn::

    uvicorn community_platform_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.logging_config import setup_logging
from .api.v1.router import router as v1_router
from .core.db import init_db
from .services.seed_service import seed_demo_data


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that startup messages
    # use the configured format.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    # The session cookie must travel with cross-origin requests from the
    # web client, so credentials are allowed for the configured origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Create the database file if needed and apply pending migrations.
        init_db()
        if settings.seed_demo_data and seed_demo_data():
            logging.getLogger(__name__).info("Demo data created")

    return app


# Create the application instance at import time so that uvicorn can
# discover it without calling create_app manually.
app = create_app()

"""FastAPI application for the resource catalog."""

import logging
from typing import Optional

from fastapi import FastAPI
from prometheus_client import CollectorRegistry
from prometheus_fastapi_instrumentator import Instrumentator

from catalog.config import settings
from catalog.dependencies import StoreDep
from catalog.errors import ConnectivityError
from catalog.resources_api import router as resources_router
from catalog.store import ResourceStore, connect

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(store: Optional[ResourceStore] = None) -> FastAPI:
    """Build the application.

    When store is given the app uses it as-is and leaves closing it to the
    caller; otherwise it connects to settings.DATABASE_URL on startup.
    """
    app = FastAPI(
        title="Resource Catalog",
        description="Catalog of links shared in chat channels",
        version="1.0.0"
    )
    app.state.store = store
    app.state.owns_store = store is None

    # Register API routers
    app.include_router(resources_router)

    # Prometheus metrics, one registry per app instance
    Instrumentator(registry=CollectorRegistry()).instrument(app).expose(app, endpoint="/metrics")

    @app.on_event("startup")
    async def startup_event():
        """Connect the resource store."""
        if app.state.store is None:
            app.state.store = await connect(settings.DATABASE_URL)
        logger.info("Resource catalog started")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Close the resource store if this app opened it."""
        if app.state.owns_store and app.state.store is not None:
            await app.state.store.close()
            app.state.store = None
            logger.info("Database connection closed")

    @app.get("/health")
    async def health_check(store: StoreDep):
        """Check that the database answers."""
        try:
            await store.ping()
        except ConnectivityError as e:
            logger.warning(f"Health check failed: {e}")
            return {"status": "degraded", "database": False}
        return {"status": "healthy", "database": True}

    return app


app = create_app()

"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Middleware and routers are all registered here; CORS, body limits and
other transport policy belong to the deployment in front of the app.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from coursehub import __version__
from coursehub.api import api_router
from coursehub.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "coursehub.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("coursehub.shutdown")

    # Close database engine
    from coursehub.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Coursehub",
        description="Course marketplace — instructors publish, students enroll",
        version=__version__,
        lifespan=lifespan,
    )

    from coursehub.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)

    # Mount API routes
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: coursehub.main:app)
app = create_app()

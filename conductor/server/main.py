"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request monitoring), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conductor.core.database import init_db
from conductor.core.logging_config import get_logger, setup_logging
from conductor.core.monitoring import initialize_logfire

from .api.v1 import (
    adoption_reports,
    analytics,
    cid_descriptors,
    collections,
    commons,
    health,
    organizations,
    peer_reviews,
    projects,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing database tables on startup.
    """
    try:
        logger.info(f"Starting up Conductor Server for organization '{settings.org_id}'...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Conductor Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description=constant.PROJECT_DESCRIPTION,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(commons.router, prefix=f"{constant.API_V1_STR}/commons", tags=["commons"])
app.include_router(collections.router, prefix=f"{constant.API_V1_STR}/collections", tags=["collections"])
app.include_router(projects.router, prefix=f"{constant.API_V1_STR}/projects", tags=["projects"])
app.include_router(peer_reviews.router, prefix=constant.API_V1_STR, tags=["peer reviews"])
app.include_router(adoption_reports.router, prefix=constant.API_V1_STR, tags=["adoption reports"])
app.include_router(cid_descriptors.router, prefix=f"{constant.API_V1_STR}/c-ids", tags=["c-id descriptors"])
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(organizations.router, prefix=f"{constant.API_V1_STR}/orgs", tags=["organizations"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_level=settings.log_level.lower())

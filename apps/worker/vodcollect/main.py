"""
FastAPI application for the VOD collection worker
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import settings
from .logging_config import setup_logging
from .routes import batch_delete, collect, health, schedule
from .services import Services, build_services

# Setup logging
logger = setup_logging(__name__)


def create_app(services: Optional[Services] = None, create_schema: bool = False) -> FastAPI:
    """
    Build the API app

    Args:
        services: Pre-built services (tests); built from settings when omitted
        create_schema: Create tables on startup instead of relying on migrations
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        logger.info(f"Starting {settings.APP_NAME} API")

        app.state.services = services or build_services()
        if create_schema:
            await app.state.services.database.create_all()
        await app.state.services.scheduler.initialize()

        yield

        logger.info(f"Shutting down {settings.APP_NAME} API")
        await app.state.services.close()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Ingestion, scheduling and maintenance of the video catalog",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(collect.router)
    app.include_router(schedule.router)
    app.include_router(batch_delete.router)

    # Localized posters
    os.makedirs(settings.IMAGE_DIR, exist_ok=True)
    app.mount(settings.IMAGE_URL_PREFIX, StaticFiles(directory=settings.IMAGE_DIR), name="images")

    return app


def run():
    """uvicorn entrypoint"""
    import uvicorn

    uvicorn.run(
        "vodcollect.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    run()

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlmodel import SQLModel

from . import models  # noqa: F401  registers tables with SQLModel metadata
from .api import api_router
from .core import database
from .core.config import settings
from .core.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def create_tables() -> None:
    """Create missing tables when the database is reachable."""
    if not settings.AUTO_CREATE_TABLES:
        return
    if not database.engine:
        logger.warning("Database engine not available; skipping table creation")
        return

    try:
        SQLModel.metadata.create_all(database.engine)
        logger.info("Database tables ready")
    except Exception as e:
        logger.error(f"Failed to create database tables: {e}")


def database_status() -> dict:
    if not database.engine:
        return {"status": "degraded", "database": "not_available"}

    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        return {"status": "degraded", "database": f"error: {e}"}
    return {"status": "healthy", "database": "connected"}


def create_app() -> FastAPI:
    app = FastAPI(
        title="TrailMate API",
        description="Trek posts with their trekking groups for the TrailMate mobile app",
        version=VERSION,
    )

    # The mobile client sends the session cookie with every request
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router)
    app.mount(
        settings.MEDIA_URL,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="media",
    )

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting TrailMate API")
        create_tables()

    @app.get("/")
    async def root():
        return {"message": "TrailMate API", "version": VERSION}

    @app.get("/health")
    async def health_check():
        """Service status, including whether the database answers."""
        return database_status()

    return app


app = create_app()


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))

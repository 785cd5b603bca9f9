#!/usr/bin/env python3
"""
Job Board API - FastAPI Application

Job postings, applications and their hiring pipeline, candidate and
employer profiles, saved items and search history.

Usage:
    uv run python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from database.database import init_db
from .config import get_config, get_project_root
from .dependencies import get_db_engine
from .exceptions import register_exception_handlers
from .routers import (
    jobs_router,
    applications_router,
    candidates_router,
    profiles_router,
    employers_router,
    saved_jobs_router,
    search_history_router,
    statuses_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load configuration
config = get_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(get_db_engine())
    yield


# Create FastAPI app
app = FastAPI(
    title="Job Board API",
    description="API for job postings, applications and hiring pipelines",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

register_exception_handlers(app)

# Include routers
app.include_router(jobs_router)
app.include_router(applications_router)
app.include_router(candidates_router)
app.include_router(profiles_router)
app.include_router(employers_router)
app.include_router(saved_jobs_router)
app.include_router(search_history_router)
app.include_router(statuses_router)

# Serve uploaded files from local storage
uploads_dir = get_project_root() / config.storage.root
if config.storage.base_url.startswith('/') and uploads_dir.exists():
    app.mount(config.storage.base_url, StaticFiles(directory=str(uploads_dir)), name="uploads")


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "jobboard-api"}


def main():
    """Run the web server."""
    import uvicorn

    logger.info(f"Starting Job Board API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()

# Main application entry point
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import content_router, health_router, records_router, search_router
from .config import get_settings
from .core.errors import ContentError
from .core.github import close_github_client
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.schemas.common import ErrorResponse
from .core.services import clear_tree_caches
from .database import create_tables

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(
        "Starting GitLearn application",
        extra={"version": __version__, "environment": settings.environment, "debug": settings.debug},
    )

    # Allow tests to skip touching the real DB (e.g., when using SQLite in-memory)
    if os.getenv("GITLEARN_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to GITLEARN_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise

    yield

    # Shutdown
    logger.info("Shutting down GitLearn application")
    clear_tree_caches()
    await close_github_client()


app = FastAPI(
    title=settings.app_name,
    description="Learning records backed by a GitHub repository",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(ContentError)
async def content_error_handler(request: Request, exc: ContentError):
    """Render content-layer failures as ErrorResponse bodies."""
    body = ErrorResponse(
        error=exc.error,
        message=exc.detail,
        details={"path": exc.path} if exc.path is not None else None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


# Add logging middleware
app.add_middleware(LoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(records_router, prefix="/api")
app.include_router(search_router, prefix="/api")
app.include_router(content_router, prefix="/api")
app.include_router(health_router, prefix="/api")


# Root endpoint
@app.get("/")
async def root():
    return {"message": "GitLearn API"}


@app.get("/api/")
async def api_root():
    return {
        "message": "GitLearn API",
        "version": __version__,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "records": "/api/records/",
            "search": "/api/search/records",
            "content": "/api/content/",
            "health": "/api/health/"
        }
    }


# Basic unprefixed health endpoint for load balancers
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("gitlearn.main:app", host=settings.host, port=settings.port, reload=settings.reload)

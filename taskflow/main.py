"""FastAPI application entry point."""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError

from . import __version__
from .config import settings
from .database import check_connection
from .routers import (
    activities_router,
    admin_router,
    auth_router,
    project_members_router,
    projects_router,
    tasks_router,
    users_router,
)
from .services.trash_service import trash_cleanup_service

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""
    # Startup
    if settings.trash_cleanup_in_process:
        logger.info("Starting trash cleanup service...")
        await trash_cleanup_service.start()
    else:
        logger.info("Trash cleanup runs in the ARQ worker; in-process service disabled")

    yield

    # Shutdown
    if trash_cleanup_service.is_running:
        logger.info("Stopping trash cleanup service...")
        await trash_cleanup_service.stop()


app = FastAPI(
    title="TaskFlow API",
    description="Collaborative projects and task boards with roles, archive and trash",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Database pool exhaustion handler - return 503 so clients can retry
@app.exception_handler(SQLAlchemyTimeoutError)
async def db_pool_exhausted_handler(request: Request, exc: SQLAlchemyTimeoutError):
    """Handle database connection pool exhaustion with 503 Service Unavailable."""
    logger.warning(
        f"Database pool exhausted on {request.method} {request.url}: {exc}"
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Service temporarily unavailable. Please retry.",
            "retry_after": 5,
        },
        headers={"Retry-After": "5"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log all unhandled exceptions with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url}:")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Include API routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(projects_router)
app.include_router(project_members_router)
app.include_router(tasks_router)
app.include_router(activities_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "healthy",
        "service": "TaskFlow API",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    database_ok = await check_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unreachable",
        "trash_cleanup": {
            "running": trash_cleanup_service.is_running,
            "last_result": trash_cleanup_service.last_result,
        },
    }

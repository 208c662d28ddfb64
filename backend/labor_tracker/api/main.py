from fastapi import FastAPI, Request, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import os
import logging

from .. import __version__
from ..database.connection import DatabaseManager, check_connection
from ..database.models import InvalidStateTransition
from ..schemas.common import ErrorResponse
from ..services.errors import LaborTrackerError
from .routes import auth, employees, projects, time_entries

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# Initialize FastAPI app with metadata
app = FastAPI(
    title="Labor Tracker API",
    description="Multi-tenant labor tracking: employees, projects, daily time entries and work-unit summaries.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Tenant registration, login and the current user"
        },
        {
            "name": "Employees",
            "description": "Employee management, CSV import and export"
        },
        {
            "name": "Projects",
            "description": "Project management with soft delete and restore"
        },
        {
            "name": "Time Entries",
            "description": "Daily bookings, batch booking, export and work-unit summaries"
        }
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LaborTrackerError)
async def labor_tracker_error_handler(request: Request, exc: LaborTrackerError):
    """Render classified service errors with their mapped status."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Service error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind}
    )


@app.exception_handler(InvalidStateTransition)
async def state_transition_handler(request: Request, exc: InvalidStateTransition):
    """A delete or restore that does not apply to the record's current state."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "error": "conflict"}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": "internal"}
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize database and perform startup tasks."""
    logger.info("Starting up Labor Tracker API...")

    try:
        DatabaseManager.init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Perform cleanup tasks on shutdown."""
    logger.info("Shutting down Labor Tracker API...")


# Health check endpoint
@app.get("/", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns basic API status and version information.
    """
    return {
        "message": "Labor Tracker API is healthy",
        "version": __version__,
        "status": "operational"
    }


@app.get("/health", tags=["Health"])
def detailed_health_check():
    """
    Detailed health check endpoint.

    Returns health status including database connectivity.
    """
    try:
        check_connection()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy - database connection failed"
        )

    return {
        "status": "healthy",
        "version": __version__,
        "database": "connected",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# Error bodies documented on every tenant-scoped router
ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}

# Include routers
app.include_router(auth.router, prefix="/api/v1")
app.include_router(employees.router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(projects.router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(time_entries.router, prefix="/api/v1", responses=ERROR_RESPONSES)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "labor_tracker.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )

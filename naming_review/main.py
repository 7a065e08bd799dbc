"""
FastAPI application entry point for the naming review service.

This is the main app that:
- Initializes FastAPI with CORS
- Registers all API routers
- Maps domain errors to JSON responses
- Sets up database connection lifecycle
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from naming_review import database
from naming_review.config import settings
from naming_review.errors import NamingReviewError
# Import models so Base.metadata knows about all tables
import naming_review.models  # noqa: F401
# Import API routers
from naming_review.api import approved_names, form_configurations, requests, suggestions

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On startup: optionally create tables (development only, production runs alembic)
    On shutdown: Close database connections gracefully
    """
    # Startup
    logger.info("Starting Naming Review API...")
    logger.info(f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else settings.database_url}")
    logger.info(f"Debug mode: {settings.debug}")

    if settings.auto_create_tables:
        async with database.engine.begin() as conn:
            await conn.run_sync(database.Base.metadata.create_all)
        logger.info("Database tables created")

    yield

    # Shutdown
    logger.info("Shutting down Naming Review API...")
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="Naming Review API",
    description="Naming request intake, review workflow and approved-name directory",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [
    "http://localhost:3000",  # Local development
]

if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(',') if origin.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NamingReviewError)
async def naming_review_error_handler(request: Request, exc: NamingReviewError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "Naming Review API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "Naming Review API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(form_configurations.router, prefix="/api/form-configurations", tags=["form-configurations"])
app.include_router(requests.router, prefix="/api/requests", tags=["requests"])
app.include_router(approved_names.router, prefix="/api/approved-names", tags=["approved-names"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["suggestions"])

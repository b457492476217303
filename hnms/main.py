"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from . import __version__
from .auth.router import router as auth_router
from .patients.router import router as patients_router
from .appointments.router import router as appointments_router
from .database import SessionLocal, check_database_connection, engine
from .config import settings
from .models import Base  # Import all models here for creating tables
from .exceptions import register_exception_handlers
from .core.middleware import setup_middlewares
from .core.bootstrap import bootstrap_super_admin_if_needed

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Verify the database, create tables and bootstrap the first super admin.
    """
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")
    try:
        check_database_connection()
    except Exception:
        logger.critical("Database connection failed, aborting startup")
        raise

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        bootstrap_super_admin_if_needed(db)
    except Exception as e:
        logger.error(f"Bootstrap process failed: {str(e)}")
    finally:
        db.close()

    yield

    logger.info("Shutting down, disposing database engine")
    engine.dispose()

# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant API for hospital patients and appointments",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

# Register exception handlers
register_exception_handlers(app)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(patients_router, prefix="/api/patients", tags=["Patients"])
app.include_router(appointments_router, prefix="/api/appointments", tags=["Appointments"])

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API version
    """
    return {
        "success": True,
        "message": f"Welcome to {settings.app_name}",
        "version": __version__,
    }

# Health check endpoint
@app.get("/health")
def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        dict: Health status information
    """
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

def run():
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("hnms.main:app", host="0.0.0.0", port=8000, reload=settings.is_development)

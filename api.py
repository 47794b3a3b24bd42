"""
Nutrition Habit Challenge FastAPI Application

Main entry point for the NHC API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Common library imports
from common.database import MongoDB
from common.utils import success_response

# App-specific imports
from nhc.config import settings
from nhc.database import ensure_indexes
from nhc.middleware import SecurityHeadersMiddleware, setup_error_handlers

# Import routers
from nhc.routers import (
    auth_router,
    campaign_router,
    organizations_router,
    users_router,
    participants_router,
    content_router,
    messages_router,
)

# Import service initialization
from nhc.dependencies import init_all_services, get_dispatcher, get_globals_service

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Database Instance
# =============================================================================
# One client (and connection pool) per process, shared by every request.
main_db = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections,
    service initialization and the mail workers.
    """
    # Startup
    logger.info("Starting NHC API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
    )
    logger.info(f"Connected to database: {settings.MONGODB_DATABASE}")

    await ensure_indexes(main_db.db)

    init_all_services(db=main_db.db, settings=settings)
    await get_globals_service().load()

    dispatcher = get_dispatcher()
    await dispatcher.start()
    logger.info("NHC API started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down NHC API...")
    await dispatcher.stop()
    await main_db.disconnect()
    logger.info("NHC API shut down complete.")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="NHC API",
    description="Nutrition Habit Challenge campaign backend",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

setup_error_handlers(app)

# =============================================================================
# Middleware
# =============================================================================
app.add_middleware(SecurityHeadersMiddleware, enable_hsts=not settings.is_development())
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =============================================================================
# Include Routers
# =============================================================================
API_PREFIX = "/api"

app.include_router(auth_router, tags=["Authentication"])
app.include_router(campaign_router, prefix=API_PREFIX, tags=["Campaign"])
app.include_router(organizations_router, prefix=API_PREFIX, tags=["Organizations"])
app.include_router(users_router, prefix=API_PREFIX, tags=["Users"])
app.include_router(participants_router, prefix=API_PREFIX, tags=["Participants"])
app.include_router(content_router, prefix=API_PREFIX, tags=["Content"])
app.include_router(messages_router, prefix=API_PREFIX, tags=["Messages"])


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and database connection.
    """
    return success_response({
        "status": "ok",
        "version": VERSION,
        "database": main_db.is_connected,
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )

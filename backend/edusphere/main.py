"""
EduSphere AI
FastAPI Application Entry Point

On startup:
1. Initialises Sentry when SENTRY_DSN is set
On shutdown:
1. Closes the shared PayPal client
2. Disposes the database engine
"""

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edusphere.config import settings
from edusphere.database import engine
from edusphere.errors import register_error_handlers
from edusphere.api.auth import router as auth_router
from edusphere.api.realtime import router as realtime_router
from edusphere.api.paypal import router as paypal_router
from edusphere.api.problems import router as problems_router
from edusphere.api.content import router as content_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("edusphere")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: error reporting on startup, client cleanup on shutdown."""
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT)
        logger.info("Sentry error reporting enabled")

    if not settings.paypal_configured:
        logger.warning("PayPal credentials missing; premium status runs in demo mode")

    logger.info("Skipping create_all; ensure Alembic migrations are applied (alembic upgrade head)")
    logger.info(f"{settings.APP_NAME} is ready!")

    yield

    # Shutdown
    logger.info("Shutting down...")
    paypal_client = getattr(app.state, "paypal_client", None)
    if paypal_client is not None:
        await paypal_client.aclose()
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="EduSphere AI: live collaborative sessions, learning records and premium subscriptions",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-User-ID"],
)

register_error_handlers(app)

# Register API routes
app.include_router(auth_router)
app.include_router(realtime_router)
app.include_router(paypal_router)
app.include_router(problems_router)
app.include_router(content_router)


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "online",
        "app": settings.APP_NAME,
        "version": "1.0.0",
    }


@app.get("/api/v1/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "paypal": "configured" if settings.paypal_configured else "demo_mode",
        "version": "1.0.0",
    }

"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager, suppress
from sqlalchemy.exc import SQLAlchemyError
import asyncio
import logging

import httpx

from rental_marketplace.config import settings
from rental_marketplace.database import (
    AsyncSessionLocal,
    test_database_connection,
    create_tables,
    close_db_connection
)
from rental_marketplace.routers import (
    auth,
    profiles,
    properties,
    reviews,
    bookings,
    favorites,
    notifications,
    email
)
from rental_marketplace.services.email_dispatch import run_outbox_worker
from rental_marketplace.services.error_handler import ErrorHandlerService
from rental_marketplace.utils.exceptions import APIException, MailRelayError

# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Opens the mail relay client and runs the outbox worker while the app is up.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")
    elif settings.is_development:
        await create_tables()

    app.state.email_http_client = httpx.AsyncClient(timeout=settings.email_request_timeout)

    worker = None
    if settings.outbox_worker_enabled and not settings.is_testing:
        worker = asyncio.create_task(
            run_outbox_worker(AsyncSessionLocal, app.state.email_http_client, settings)
        )

    yield

    logger.info("Shutting down application")
    if worker is not None:
        worker.cancel()
        with suppress(asyncio.CancelledError):
            await worker
    await app.state.email_http_client.aclose()
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Rental marketplace API where rent providers list properties and renters request bookings.

    ## Features

    * **Listings**: Providers publish properties with ordered image URLs
    * **Search**: Filter by location, type, budget range, bedrooms and free text
    * **Bookings**: Renters request date ranges, providers confirm or cancel
    * **Notifications**: Booking emails through a retried outbox plus in-app notifications
    * **Reviews and favorites**: One review per renter and property, bookmarked listings

    ## Authentication

    Use `/api/v1/auth/signup` or `/api/v1/auth/login` to obtain a JWT token,
    then include it in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Signup, login and token management"},
        {"name": "Profiles", "description": "The signed-in profile"},
        {"name": "Properties", "description": "Property listing management and search"},
        {"name": "Reviews", "description": "Property reviews"},
        {"name": "Bookings", "description": "Booking requests and provider decisions"},
        {"name": "Favorites", "description": "Bookmarked properties"},
        {"name": "Notifications", "description": "In-app notifications"},
        {"name": "Email", "description": "Mail relay used by the email outbox"},
        {"name": "Health", "description": "System health endpoints"}
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routers
for router_module in (auth, profiles, properties, reviews, bookings, favorites, notifications, email):
    app.include_router(router_module.router, prefix=settings.api_v1_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(MailRelayError)
async def mail_relay_exception_handler(request: Request, exc: MailRelayError):
    """Answer mail relay failures in the relay's own body."""
    return ErrorHandlerService.handle_mail_relay_error(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions, including routing 404s, with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "healthy",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_v1_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint with database connectivity test.
    Used by Docker health checks and load balancers.
    """
    db_healthy = await test_database_connection()
    if not db_healthy:
        raise HTTPException(status_code=503, detail="Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected",
        "smtp_configured": settings.smtp_configured
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "rental_marketplace.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

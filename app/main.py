"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

import redis.asyncio as redis
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import router as v1_router
from app.config import get_settings
from app.database import close_db, init_models
from app.errors import MethodNotAllowedError, RestaurantError
from app.redis_client import close_redis, get_redis, redis_available
from app.schemas.common import ErrorResponse
from app.validators.hours import BusinessHours


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Restaurant Reservations API...")

    # Fail fast on bad business-hours settings
    hours = BusinessHours.from_settings(settings)
    logger.info(
        f"Taking reservations {hours.opening_time:%H:%M}-{hours.closing_time:%H:%M}, "
        f"closed on {', '.join(settings.CLOSED_DAYS) or 'no days'}"
    )

    if settings.DB_CREATE_TABLES:
        await init_models()
        logger.info("Database tables created")

    # Initialize Redis connection
    await get_redis()
    logger.info("Redis client ready")

    yield

    # Shutdown
    logger.info("Shutting down Restaurant Reservations API...")

    await close_redis()
    logger.info("Redis connection closed")

    await close_db()
    logger.info("Database connections closed")


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as `{"error": message}` with its status code."""

    @app.exception_handler(RestaurantError)
    async def restaurant_error_handler(request: Request, exc: RestaurantError):
        """Handle validation, not-found, conflict and method errors."""
        logger.info(
            f"{request.method} {request.url.path} rejected "
            f"({exc.status_code}): {exc.message}"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(exclude_none=True),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle routing errors raised by the framework."""
        if exc.status_code == 405:
            return await restaurant_error_handler(
                request, MethodNotAllowedError(request.method, request.url.path)
            )
        if exc.status_code == 404:
            message = f"Path not found: {request.url.path}"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=message).model_dump(exclude_none=True),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Handle malformed path parameters and request bodies."""
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=f"Invalid request: {problems}").model_dump(
                exclude_none=True
            ),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Internal Server Error",
                detail=str(exc) if settings.DEBUG else None,
            ).model_dump(),
        )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Restaurant Reservations API

Reservations and tables for a single restaurant.

### Reservations
- **Booking rules**: only future dates, never on a closed weekday, and only
  within the opening window
- **Status lifecycle**: booked → seated → finished, or booked → cancelled
- **Search**: by date (unfinished, by time) or by any field (substring)

### Tables
- **Seating**: assign a booked reservation to a free table that fits the party
- **Unseating**: free the table and finish the reservation
- Both rows change in one transaction, under a Redis lock per table and
  reservation

All request bodies are wrapped as `{"data": {...}}` and all successful
responses as `{"data": ...}`. Errors are returned as `{"error": "..."}`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(v1_router, prefix="/api")

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check(redis_client: Annotated[redis.Redis, Depends(get_redis)]):
        """Health check endpoint."""
        redis_ok = await redis_available(redis_client)
        return {
            "status": "healthy" if redis_ok else "degraded",
            "version": settings.APP_VERSION,
            "redis": "up" if redis_ok else "down",
        }

    register_exception_handlers(app)

    return app


# Create application instance
app = create_app()


def run():
    """Run the application with uvicorn."""
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()

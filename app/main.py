"""
Application factory for the Estate Listing API.
Wires routers, middleware and the error envelope handlers.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from app.config import settings
from app.database import check_database_connection, close_db_connection
from app.routers import auth_router, users_router, properties_router, admin_router
from app.utils.exceptions import APIException
from app.services.error_handler import ErrorHandlerService
from app.middleware import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Checks the database on startup and releases the pool on shutdown.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if not await check_database_connection():
        logger.error("Failed to connect to database on startup")

    yield

    logger.info(f"Stopping {settings.app_name}")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    REST backend for a real-estate listing marketplace.

    ## Features

    * **Listings**: create, browse, filter, search and manage sale and rental properties
    * **Users**: profiles, favorites and saved searches
    * **Inquiries**: message a listing's owner
    * **Admin**: user roles, listing moderation, dashboard statistics and recent activity

    ## Authentication

    Protected endpoints expect `Authorization: Bearer <token>`. Obtain a token from
    `/api/auth/register` or `/api/auth/login`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and the current user"},
        {"name": "Users", "description": "Own profile, favorites and saved searches"},
        {"name": "Properties", "description": "Listing management, filtering and search"},
        {"name": "Admin", "description": "Moderation and platform statistics"},
        {"name": "Health", "description": "Service status"},
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Processing-Time"],
)

app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=settings.slow_request_threshold,
    enable_detailed_logging=settings.debug,
)

# Include API routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)
app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(admin_router, prefix=settings.api_prefix)


# Every failure leaves through the shared envelope
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with the shared envelope."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as 400 with field details."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle framework HTTP exceptions such as unknown routes."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with a generic 500 envelope."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """Basic service information."""
    return {
        "success": True,
        "data": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "apiPrefix": settings.api_prefix,
            "documentation": {"swaggerUi": "/docs", "redoc": "/redoc"},
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness probe. Answers 503 when the database is unreachable.
    """
    if not await check_database_connection():
        raise APIException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed",
            error_code="SERVICE_UNAVAILABLE"
        )
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "database": "connected",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

"""
AcadCentral Department Portal
FastAPI application factory for the remote mirror
"""

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import sync
from .config import get_settings
from .database.connection import get_dialect_name
from .exceptions import AppException
from .utils.helpers import utc_now_iso

# Configure logging
logger = logging.getLogger(__name__)


def health_status() -> dict:
    """Body served by every health check endpoint"""
    return {
        "status": "ok",
        "db": get_dialect_name(),
        "timestamp": utc_now_iso()
    }


class RequestContextMiddleware:
    """Middleware to add request timing"""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            start_time = time.time()

            async def send_wrapper(message):
                if message["type"] == "http.response.start":
                    process_time = time.time() - start_time
                    message["headers"] = list(message.get("headers", []))
                    message["headers"].append(
                        (b"x-process-time", f"{process_time:.6f}".encode())
                    )
                await send(message)

            await self.app(scope, receive, send_wrapper)
        else:
            await self.app(scope, receive, send)


def create_app() -> FastAPI:
    """Create and configure the mirror FastAPI application"""

    settings = get_settings()

    app = FastAPI(
        title="AcadCentral Mirror API",
        description="Durable relational mirror of the AcadCentral portal collections",
        version=settings.VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        default_response_class=JSONResponse
    )

    # Add custom middleware
    app.add_middleware(RequestContextMiddleware)

    # Add compression middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-process-time"]
    )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle custom application exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.details,
                "timestamp": time.time()
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors"""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": exc.errors(),
                "timestamp": time.time()
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTP_ERROR",
                "message": exc.detail,
                "timestamp": time.time()
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.exception(f"{request.url.path} error: {exc}")

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An internal server error occurred",
                "timestamp": time.time()
            }
        )

    # Health check endpoint
    @app.get("/health", tags=["System"])
    async def health_check():
        """Mirror health check endpoint"""
        return health_status()

    # Include API routers
    app.include_router(
        sync.router,
        tags=["Mirror Synchronization"]
    )

    logger.info("✅ Mirror API configured successfully")
    return app


# Export the app factory
__all__ = ["create_app", "health_status"]

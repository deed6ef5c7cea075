"""
Application builder.
Wires middlewares, routers, lifespan and exception handlers step by step.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import PersistenceError, SalesTrackerError
from app.core.logging import api_logger, app_logger, init_app_logging
from app.routers import analytics, export, health, sales
from app.services.dependencies import get_ledger_service


class ApplicationBuilder:
    """Builder for the FastAPI application with separated concerns."""

    def __init__(self):
        self.app = FastAPI(
            title=settings.APP_NAME,
            version="1.0.0",
            description="Daily sales ledger, analytics and report export",
            docs_url="/docs",
            redoc_url="/redoc",
            openapi_url="/openapi.json",
        )
        self._middlewares_added = False
        self._routes_added = False
        self._startup_handlers_added = False

    def add_cors_middleware(self) -> ApplicationBuilder:
        """Add CORS middleware configuration."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS_LIST or ["http://localhost:3000", "http://localhost:5173"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["Content-Disposition"],
        )
        app_logger.info("CORS middleware added")
        return self

    def add_security_middleware(self) -> ApplicationBuilder:
        """Add security-related response headers."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        @self.app.middleware("http")
        async def add_security_headers(request: Request, call_next):
            response = await call_next(request)
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            return response

        app_logger.info("Security middleware added")
        return self

    def add_request_logging_middleware(self) -> ApplicationBuilder:
        """Add request logging middleware."""
        if self._middlewares_added:
            raise RuntimeError("Middlewares already added")

        @self.app.middleware("http")
        async def log_requests(request: Request, call_next):
            response = await call_next(request)
            api_logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
            )
            return response

        app_logger.info("Request logging middleware added")
        return self

    def finalize_middlewares(self) -> ApplicationBuilder:
        """Mark middlewares as finalized."""
        self._middlewares_added = True
        return self

    def add_routes(self) -> ApplicationBuilder:
        """Add all API routes."""
        if self._routes_added:
            raise RuntimeError("Routes already added")

        self.app.include_router(health.router)
        self.app.include_router(sales.router)
        self.app.include_router(analytics.router)
        self.app.include_router(export.router)

        @self.app.get("/")
        def root():
            return {
                "name": settings.APP_NAME,
                "env": settings.ENV,
                "docs": "/docs",
                "openapi": "/openapi.json",
                "healthz": "/healthz",
                "readyz": "/readyz",
            }

        app_logger.info("All routes added")
        self._routes_added = True
        return self

    def add_startup_handlers(self) -> ApplicationBuilder:
        """Add startup and shutdown handlers."""
        if self._startup_handlers_added:
            raise RuntimeError("Startup handlers already added")

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            app_logger.info("Starting application...", env=settings.ENV, store=settings.STORE_BACKEND)
            service = app.dependency_overrides.get(get_ledger_service, get_ledger_service)()
            # an unreadable store is not fatal: the session starts with an empty ledger
            days = len(service.available_dates())
            if service.load_error:
                app_logger.warning("Sales store unavailable at startup", error=service.load_error)
            else:
                app_logger.info("Ledger loaded", days=days)
            yield
            app_logger.info("Shutting down application...")

        self.app.router.lifespan_context = lifespan
        self._startup_handlers_added = True
        app_logger.info("Startup handlers added")
        return self

    def add_exception_handlers(self) -> ApplicationBuilder:
        """Map the error taxonomy to `{"error": ...}` JSON bodies."""

        @self.app.exception_handler(SalesTrackerError)
        async def sales_tracker_error_handler(request: Request, exc: SalesTrackerError):
            if isinstance(exc, PersistenceError):
                app_logger.warning("Store error", path=request.url.path, error=exc.message)
            content = {"error": exc.message}
            if exc.details:
                content["details"] = exc.details
            return JSONResponse(status_code=exc.status_code, content=content)

        @self.app.exception_handler(StarletteHTTPException)
        async def http_error_handler(request: Request, exc: StarletteHTTPException):
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": str(exc.detail)},
                headers=getattr(exc, "headers", None),
            )

        @self.app.exception_handler(RequestValidationError)
        async def validation_error_handler(request: Request, exc: RequestValidationError):
            errors = [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
                for err in exc.errors()
            ]
            return JSONResponse(
                status_code=422,
                content={"error": "Invalid request body", "detail": errors},
            )

        @self.app.exception_handler(Exception)
        async def internal_error_handler(request: Request, exc: Exception):
            app_logger.error("Internal error", exc=exc, path=request.url.path)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error"},
            )

        app_logger.info("Exception handlers added")
        return self

    def build(self) -> FastAPI:
        """Build and return the configured FastAPI application."""
        if not self._middlewares_added:
            raise RuntimeError("Middlewares not finalized")
        if not self._routes_added:
            raise RuntimeError("Routes not added")
        if not self._startup_handlers_added:
            raise RuntimeError("Startup handlers not added")

        app_logger.info("FastAPI application built successfully")
        return self.app


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application using the builder pattern.
    """
    init_app_logging()

    builder = (
        ApplicationBuilder()
        .add_cors_middleware()
        .add_security_middleware()
        .add_request_logging_middleware()
        .finalize_middlewares()
        .add_routes()
        .add_startup_handlers()
        .add_exception_handlers()
    )

    return builder.build()

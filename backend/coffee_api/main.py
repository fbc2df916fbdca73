"""
Coffee API - FastAPI Application Factory
=========================================

What:  Builds a fully wired FastAPI application from an explicit
       ServiceConfig and Database.
How:   create_app(config, database) registers middleware, exception handlers
       and routers, and stores both objects on app.state. There is no
       module-level app instance; coffee_api.startup builds one after the
       database is reachable and the schema is in place.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌─────────┐ ┌────────────────┐ ┌─────────┐         │
    │  │ /coffee │ │ /coffee/drinks │ │ /health │         │
    │  └─────────┘ └────────────────┘ └─────────┘         │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ValidationError→400 │ DatabaseError→500      │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Shutdown: dispose the database engine (close all pooled connections).
    Startup work (parameters, authentication, schema sync) happens before
    the app is served; see coffee_api.startup.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coffee_api import __version__
from coffee_api.config import ServiceConfig
from coffee_api.database import Database
from coffee_api.exceptions import CoffeeApiError, DatabaseError, ValidationError
from coffee_api.middleware.logging import RequestLoggingMiddleware
from coffee_api.middleware.request_id import RequestIDMiddleware, request_id_var
from coffee_api.routes import coffee, health

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure process-wide logging.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once by the entrypoint before anything else logs.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Release the connection pool when the server shuts down."""
    yield

    logger.info("Coffee API shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to {"error": <message>} responses.

    Handler hierarchy:
        ValidationError         → 400 with the validation message
        RequestValidationError  → 400 "Invalid request body"
        HTTPException           → its own status (404, 405, ...)
        DatabaseError           → 500, opaque message, context logged
        CoffeeApiError (base)   → 500, opaque message
        Exception (fallback)    → 500, opaque message, traceback logged
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON or wrong field types. FastAPI's default is 422."""
        rid = request_id_var.get("")
        logger.warning("[%s] Invalid request body: %s", rid, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(CoffeeApiError)
    async def handle_app_error(request: Request, exc: CoffeeApiError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged server-side only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: ServiceConfig, database: Database) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:   Resolved service configuration
        database: Database whose sessions the route handlers will use

    Returns:
        Fully configured FastAPI instance, ready to be served.
    """
    app = FastAPI(
        title="Coffee API",
        description="CRUD service for coffees and the drinks made from them.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database

    # Middleware executes in reverse order of addition: RequestID → Logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(coffee.router)
    app.include_router(health.router)

    return app

import json
from datetime import datetime
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.infra.config.settings import settings
from src.infra.database import DatabaseManager
from src.core.logger.logger import logger
from src.api.router import health, users
from src.api.middleware.logging.request_logging import RequestLoggingMiddleware
from src.core.exceptions.handler import ServiceError, GlobalErrorHandler

def create_app(db_manager: Optional[DatabaseManager] = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Wallet Registry API - user records whose wallet ownership is proven by Ed25519 signatures.

## Endpoints
- **GET /users**: list every registered user
- **POST /users**: register a user (signed `time`, base58 signature in `message`)
- **PUT /users/{id}**: update a user, re-proving wallet ownership
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,  # 10 minutes
    )

    # Request logging middleware (should be first to catch all requests)
    app.add_middleware(RequestLoggingMiddleware, error_log_path=settings.ERROR_LOG_PATH)

    # Add centralized error handlers
    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, GlobalErrorHandler.http_exception_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)

    # Store handle shared by all requests for the life of the process
    app.state.db = db_manager or DatabaseManager()

    @app.on_event("startup")
    async def startup_event():
        logger.info(json.dumps({
            "message": "Starting Wallet Registry",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION
        }))

        # The server keeps running without a database; requests report a store error
        try:
            await app.state.db.connect()
        except Exception as e:
            logger.error(f"Failed to connect to database on startup: {str(e)}")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.db.close()
        logger.info(json.dumps({
            "message": "Shutting down Wallet Registry",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION
        }))

    return app

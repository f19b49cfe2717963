"""
ManoSetu FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling and rate limiting middleware
- Router registration
- Metrics endpoint

This is the production entry point for the ManoSetu backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from manosetu import __version__
from manosetu.config import Settings, get_settings
from manosetu.config.logging_config import configure_logging, get_logger
from manosetu.domain.errors import SessionError
from manosetu.infrastructure.database import get_db_manager
from manosetu.infrastructure.metrics import metrics_router, update_system_info
from manosetu.infrastructure.monitoring import init_sentry
from manosetu.api.v1.router import api_router
from manosetu.api.middleware.error_handler import ErrorHandlerMiddleware, session_error_handler
from manosetu.api.middleware.rate_limiter import RateLimitConfig, RateLimitMiddleware

# Initialize settings and logging
settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    
    Handles startup and shutdown of all services.
    """
    app_settings: Settings = app.state.settings
    
    logger.info(
        "Starting ManoSetu application",
        env=app_settings.env,
        version=__version__,
    )
    
    try:
        init_sentry(
            app_settings.sentry.dsn,
            environment=app_settings.env,
            release=f"manosetu@{__version__}",
            traces_sample_rate=app_settings.sentry.traces_sample_rate,
        )
        update_system_info(app_settings.env)
        
        db = get_db_manager()
        await db.initialize()
        logger.info("Database connection initialized")
        
        if not app_settings.video.is_configured():
            logger.warning("Video provider not configured, room credentials unavailable")
        
        yield
        
    finally:
        logger.info("Shutting down ManoSetu application")
        await get_db_manager().close()
        logger.info("ManoSetu application shutdown complete")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as 400 with the offending fields."""
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "invalid_request",
            "message": "Invalid request",
            "details": [
                {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                for err in exc.errors()
            ],
        },
    )


def create_application(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.
    
    Args:
        app_settings: Settings override (defaults to environment settings)
        
    Returns:
        Configured FastAPI application
    """
    app_settings = app_settings or settings
    api_prefix = f"/api/{app_settings.api_version}"
    
    app = FastAPI(
        title="ManoSetu API",
        description="Therapy session booking and video rooms - Backend API",
        version=__version__,
        docs_url="/docs" if not app_settings.is_production() else None,
        redoc_url="/redoc" if not app_settings.is_production() else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    
    app.add_exception_handler(SessionError, session_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    if app_settings.rate_limit.enabled:
        app.add_middleware(
            RateLimitMiddleware,
            config=RateLimitConfig(
                requests_per_minute=app_settings.rate_limit.requests_per_minute,
                burst_size=app_settings.rate_limit.burst_size,
            ),
            api_prefix=api_prefix,
        )
    
    # Outermost: sees every request, including rate-limited ones
    app.add_middleware(ErrorHandlerMiddleware)
    
    app.include_router(
        api_router,
        prefix=api_prefix,
    )
    app.include_router(metrics_router)
    
    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - basic info."""
        return {
            "name": "ManoSetu API",
            "version": __version__,
            "status": "operational",
        }
    
    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "manosetu.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )

"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    TRANSCODER_MOCK_MODE=true uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import frames, health
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs on startup and shutdown. On startup we check the configuration
    and make sure the media directories exist.
    """
    # Startup
    settings = get_settings()

    logger.info(
        "SwingFrames API starting",
        extra={
            "version": __version__,
            "media_root": settings.media_root,
            "mock_mode": {"transcoder": settings.transcoder_mock_mode},
        }
    )

    # Validate configuration
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )
        # Extraction requests will fail until this is fixed;
        # health endpoints still report the problem

    settings.uploads_path.mkdir(parents=True, exist_ok=True)

    yield

    # Shutdown
    logger.info("SwingFrames API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Swing phase GIF and thumbnail extraction.

        ## Workflow

        1. **Extract**: `POST /api/v1/analyses/{analysis_id}/frames`
           - Send the uploaded video's file name and the swing phases
             returned by the AI analysis
           - Receive one entry per successfully extracted phase

        2. **Look up**: `GET /api/v1/analyses/{analysis_id}/frames`
           - Stored extraction results for an analysis

        3. **Fetch files**: `GET /api/frames/{analysis_id}/{frame_name}`
           - Phase GIFs/stills and `full_swing.gif`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    # Configure allowed origins via CORS_ORIGINS environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        frames.router,
        prefix="/api/v1/analyses",
        tags=["Frames"],
    )

    app.include_router(
        frames.files_router,
        prefix="/api/frames",
        tags=["Frames"],
    )

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - point at the docs."""
        return {
            "message": "SwingFrames API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Stops stack traces from leaking to clients. We log the full error
        server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    # Get settings to determine log level
    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )

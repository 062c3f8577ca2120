"""
FastAPI application for keyphrase extraction and event recommendation.

This is the main application that wires routers, middleware and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from ..version import API_VERSION
from ..config import settings
from ..logging_config import setup_logging
from .routes import health, version, keyphrases, recommend
from .middleware import (
    setup_logging_middleware,
    setup_error_handling_middleware,
    setup_exception_handlers,
)

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "Starting Event Recommender API",
        version=API_VERSION,
        log_level=settings.log_level,
        llm_provider=settings.llm_provider,
        ai_enhancement=settings.enable_ai_enhancement,
        embedding_backend=settings.embedding_backend,
    )
    yield
    logger.info("Shutting down Event Recommender API")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Event Recommender",
        description="Keyphrase extraction (TextRank + LLM enhancement) and tag-to-event relevance ranking",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom middleware (order matters - first added = outermost)
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(keyphrases.router)
    app.include_router(recommend.router)

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "event_recommender.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

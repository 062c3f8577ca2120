"""
FastAPI middleware and exception handlers for logging and error handling.
"""

import time
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..ranking.ranker import InvalidRecommendationRequest, RankingError

logger = structlog.get_logger(__name__)


def setup_logging_middleware(app: FastAPI) -> None:
    """
    Setup request/response logging middleware.

    Logs all requests with:
    - Request method and path
    - Response status code
    - Processing time
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
            process_time = time.time() - start_time

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=round(process_time * 1000, 2),
            )

            response.headers["X-Process-Time"] = str(process_time)
            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round(process_time * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Setup global error handling middleware.

    Catches unhandled exceptions and returns consistent error responses.
    """

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error=str(e),
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "detail": str(e) if app.debug else "An unexpected error occurred",
                },
            )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Map domain errors to HTTP responses.

    - InvalidRecommendationRequest → 400
    - RankingError → 502 with the failing tag/query echoed back
    """

    @app.exception_handler(InvalidRecommendationRequest)
    async def handle_invalid_request(request: Request, exc: InvalidRecommendationRequest):
        logger.info("Rejected recommendation request", path=request.url.path, reason=str(exc))
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "detail": str(exc)},
        )

    @app.exception_handler(RankingError)
    async def handle_ranking_error(request: Request, exc: RankingError):
        logger.warning(
            "Ranking failed",
            path=request.url.path,
            tag=exc.tag,
            query=exc.query,
            detail=exc.detail,
        )
        content = {"success": False, "error": "Ranking failed", "detail": exc.detail}
        if exc.tag is not None:
            content["tag"] = exc.tag
        if exc.query is not None:
            content["query"] = exc.query
        return JSONResponse(status_code=502, content=content)

"""
Keyphrase extraction API endpoints.

Provides endpoints to extract keyphrases from event text, build the
EventKeyData projection used for ranking, and inspect or clear the result cache.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ...enhancement.pipeline import KeyphrasePipeline
from ...models.api_models import (
    CacheStatsResponse,
    ExtractKeyDataRequest,
    ExtractKeyphrasesRequest,
)
from ...models.events import EventKeyData
from ...models.keyphrases import KeyphraseExtractionResult
from ..dependencies import get_pipeline


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/keyphrases", tags=["keyphrases"])


# Extraction runs blocking LLM calls, so these handlers are sync (threadpool).

@router.post(
    "/extract",
    response_model=KeyphraseExtractionResult,
    response_model_by_alias=True,
)
def extract_keyphrases_endpoint(
    request: ExtractKeyphrasesRequest,
    pipeline: KeyphrasePipeline = Depends(get_pipeline),
):
    """
    Extract the final keyphrase set from an event text.

    Enhancement failures degrade to lexical keyphrases and are not errors.

    Examples:
        POST /api/v1/keyphrases/extract
        {"document": {"id": "evt-1", "text": "React/Next.jsを使ったフロントエンド勉強会"}}
    """
    logger.info(
        "Received keyphrase extraction request",
        document_id=request.document.id,
        text_length=len(request.document.text),
    )

    try:
        return pipeline.extract(request.document)
    except Exception as e:
        logger.error(
            "Keyphrase extraction failed",
            document_id=request.document.id,
            error=str(e),
            exc_info=True,
        )
        raise HTTPException(
            status_code=500, detail=f"Keyphrase extraction failed: {str(e)}"
        ) from e


@router.post("/key-data", response_model=EventKeyData, response_model_by_alias=True)
def extract_key_data_endpoint(
    request: ExtractKeyDataRequest,
    pipeline: KeyphrasePipeline = Depends(get_pipeline),
):
    """Build key phrases and key sentences for one event."""
    logger.info("Received key data request", event_id=request.id)

    try:
        return pipeline.extract_key_data(request.id, request.title, request.detail)
    except Exception as e:
        logger.error("Key data extraction failed", event_id=request.id, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500, detail=f"Key data extraction failed: {str(e)}"
        ) from e


@router.get("/cache", response_model=CacheStatsResponse)
async def cache_stats(pipeline: KeyphrasePipeline = Depends(get_pipeline)):
    """Return size and keys of the result cache."""
    stats = pipeline.cache.stats()
    return CacheStatsResponse(size=stats.size, keys=stats.keys)


@router.delete("/cache", response_model=CacheStatsResponse)
async def clear_cache(pipeline: KeyphrasePipeline = Depends(get_pipeline)):
    """Clear the result cache."""
    pipeline.cache.clear()
    stats = pipeline.cache.stats()
    return CacheStatsResponse(size=stats.size, keys=stats.keys)

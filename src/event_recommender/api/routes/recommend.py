"""
Event recommendation API endpoints.

Events arrive pre-filtered (location, format) in the request body; these
endpoints only rank them.

- POST /api/v1/recommend/tags - per-tag recommendations
- POST /api/v1/recommend/message - free-text (and/or tags) recommendations

InvalidRecommendationRequest and RankingError are mapped to 400 and 502 by the
exception handlers in ``api.middleware``.
"""

import structlog
from fastapi import APIRouter, Depends

from ...models.api_models import (
    RecommendByMessageRequest,
    RecommendByTagsRequest,
    RecommendByTagsResponse,
)
from ...models.events import QueryRecommendations
from ...ranking.ranker import NO_EVENTS_MESSAGE, NO_TAGS_MESSAGE, RelevanceRanker
from ..dependencies import get_ranker


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/recommend", tags=["recommend"])


@router.post("/tags", response_model=RecommendByTagsResponse, response_model_by_alias=True)
def recommend_by_tags(
    request: RecommendByTagsRequest,
    ranker: RelevanceRanker = Depends(get_ranker),
):
    """
    Rank events for each interest tag.

    Examples:
        POST /api/v1/recommend/tags
        {"tags": ["React"], "events": [{"id": "1", "title": "...", "keyPhrases": [...], "keySentences": [...]}]}
    """
    tags = [tag for tag in request.tags if tag and tag.strip()]
    if not tags:
        return RecommendByTagsResponse(success=True, message=NO_TAGS_MESSAGE, data=[])

    if not request.events:
        return RecommendByTagsResponse(success=True, message=NO_EVENTS_MESSAGE, data=[])

    logger.info("Received tag recommendation request", tags=tags, events_count=len(request.events))

    data = ranker.rank_tags(tags, request.events)
    return RecommendByTagsResponse(success=True, data=data)


@router.post(
    "/message",
    response_model=QueryRecommendations,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def recommend_by_message(
    request: RecommendByMessageRequest,
    ranker: RelevanceRanker = Depends(get_ranker),
):
    """Rank events for a free-text message, tags, or both."""
    logger.info(
        "Received message recommendation request",
        has_message=bool(request.message),
        tags_count=len(request.tags),
        events_count=len(request.events),
    )
    return ranker.rank_query(request.message, request.tags, request.events)

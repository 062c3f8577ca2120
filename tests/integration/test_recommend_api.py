"""
Integration tests for recommendation API endpoints.

Tests coverage:
- /api/v1/recommend/tags and /api/v1/recommend/message
- Empty-input messages (not errors)
- Error mapping: invalid request → 400, ranking failure → 502

The ranker dependency is overridden with one using bag-of-terms embeddings.
"""

import pytest

from event_recommender.api.app import app
from event_recommender.api.dependencies import get_ranker
from event_recommender.ranking.ranker import (
    NO_EVENTS_MESSAGE,
    NO_QUERY_MATCH_MESSAGE,
    NO_TAGS_MESSAGE,
    RelevanceRanker,
)


@pytest.fixture
def events_payload(sample_events):
    return [ev.model_dump(by_alias=True) for ev in sample_events]


@pytest.fixture
def ranker(fake_embeddings):
    ranker = RelevanceRanker(fake_embeddings)
    app.dependency_overrides[get_ranker] = lambda: ranker
    return ranker


@pytest.fixture
def failing_ranker(failing_embeddings):
    ranker = RelevanceRanker(failing_embeddings)
    app.dependency_overrides[get_ranker] = lambda: ranker
    return ranker


@pytest.mark.integration
@pytest.mark.asyncio
class TestRecommendByTagsAPI:
    """Per-tag recommendation endpoint."""

    async def test_recommend_by_tags(self, async_client, ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/tags",
            json={"tags": ["React", "Python"], "events": events_payload},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [group["tag"] for group in body["data"]] == ["React", "Python"]

        top = body["data"][0]["recommendations"][0]
        assert top["id"] == "evt-react"
        assert set(top) == {"id", "title", "relevanceScore", "relevanceReason"}
        assert body["data"][1]["recommendations"][0]["id"] == "evt-python"

    async def test_no_tags(self, async_client, ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/tags",
            json={"tags": ["", "  "], "events": events_payload},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": NO_TAGS_MESSAGE, "data": []}

    async def test_no_events(self, async_client, ranker):
        response = await async_client.post(
            "/api/v1/recommend/tags",
            json={"tags": ["React"], "events": []},
        )

        assert response.status_code == 200
        assert response.json()["message"] == NO_EVENTS_MESSAGE

    async def test_ranking_failure_is_502(self, async_client, failing_ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/tags",
            json={"tags": ["React"], "events": events_payload},
        )

        assert response.status_code == 502
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Ranking failed"
        assert body["tag"] == "React"
        assert "ConnectionError" in body["detail"]

    @pytest.mark.parametrize("bad_phrase", [{"text": "React"}, 42])
    async def test_malformed_key_phrase_is_422(self, async_client, ranker, bad_phrase):
        response = await async_client.post(
            "/api/v1/recommend/tags",
            json={"tags": ["React"], "events": [{"id": "evt-1", "keyPhrases": [bad_phrase]}]},
        )

        assert response.status_code == 422
        assert "key phrase must be a string" in response.text


@pytest.mark.integration
@pytest.mark.asyncio
class TestRecommendByMessageAPI:
    """Free-text recommendation endpoint."""

    async def test_message_and_tags(self, async_client, ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/message",
            json={"message": "Pythonでデータ分析", "tags": ["機械学習"], "events": events_payload},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["query"] == "Pythonでデータ分析・機械学習"
        assert [r["id"] for r in body["recommendations"]] == ["evt-python"]
        assert "message" not in body

    async def test_no_match(self, async_client, ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/message",
            json={"message": "Rustで組込み開発", "events": events_payload},
        )

        assert response.status_code == 200
        assert response.json()["message"] == NO_QUERY_MATCH_MESSAGE

    async def test_missing_message_and_tags_is_400(self, async_client, ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/message",
            json={"events": events_payload},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid request"

    async def test_ranking_failure_echoes_query(self, async_client, failing_ranker, events_payload):
        response = await async_client.post(
            "/api/v1/recommend/message",
            json={"message": "React", "events": events_payload},
        )

        assert response.status_code == 502
        assert response.json()["query"] == "React"

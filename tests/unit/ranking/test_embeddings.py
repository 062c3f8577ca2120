"""
Unit tests for embedding backends.

Models and API clients are mocked; no downloads or network calls.
"""

import numpy as np
import pytest
from unittest.mock import Mock, patch

from event_recommender.config import Settings
from event_recommender.ranking.embeddings import (
    OpenAIEmbeddingBackend,
    SentenceTransformerBackend,
    cosine_similarities,
    create_embedding_backend,
)


@pytest.mark.unit
class TestCosineSimilarities:
    def test_values(self):
        query = np.array([1.0, 0.0])
        matrix = np.array([[2.0, 0.0], [0.0, 3.0], [1.0, 1.0]])

        sims = cosine_similarities(query, matrix)

        assert sims.tolist() == pytest.approx([1.0, 0.0, 1 / np.sqrt(2)])

    def test_zero_vectors(self):
        sims = cosine_similarities(np.zeros(2), np.array([[1.0, 0.0]]))
        assert sims.tolist() == [0.0]

    def test_empty_matrix(self):
        assert cosine_similarities(np.zeros(0), np.zeros((0, 0))).size == 0


@pytest.mark.unit
class TestSentenceTransformerBackend:
    """Test local embedding backend."""

    @patch('event_recommender.ranking.embeddings.get_sentence_model')
    def test_embed(self, mock_get_model):
        mock_model = Mock()
        mock_model.encode.return_value = np.ones((2, 4))
        mock_get_model.return_value = mock_model

        vectors = SentenceTransformerBackend("test-model").embed(["React", "Go"])

        assert vectors.shape == (2, 4)
        mock_get_model.assert_called_once_with("test-model")
        mock_model.encode.assert_called_once_with(
            ["React", "Go"], convert_to_numpy=True, show_progress_bar=False
        )

    @patch('event_recommender.ranking.embeddings.get_sentence_model')
    def test_empty_batch_skips_model(self, mock_get_model):
        assert SentenceTransformerBackend().embed([]).shape == (0, 0)
        mock_get_model.assert_not_called()


@pytest.mark.unit
class TestOpenAIEmbeddingBackend:
    """Test OpenAI embedding backend."""

    @patch('event_recommender.ranking.embeddings.OpenAI')
    def test_results_reordered_by_index(self, mock_openai_class):
        mock_client = Mock()
        mock_client.embeddings.create.return_value = Mock(data=[
            Mock(index=1, embedding=[0.0, 1.0]),
            Mock(index=0, embedding=[1.0, 0.0]),
        ])
        mock_openai_class.return_value = mock_client

        backend = OpenAIEmbeddingBackend(api_key="sk-test")
        vectors = backend.embed(["React", "Go"])

        assert vectors.tolist() == [[1.0, 0.0], [0.0, 1.0]]
        mock_client.embeddings.create.assert_called_once_with(
            model="text-embedding-3-small", input=["React", "Go"]
        )


@pytest.mark.unit
class TestCreateEmbeddingBackend:
    """Test backend factory."""

    def test_default_sentence_transformers(self):
        backend = create_embedding_backend(Settings(embedding_model_name="my-model"))

        assert isinstance(backend, SentenceTransformerBackend)
        assert backend.model_name == "my-model"

    @patch('event_recommender.ranking.embeddings.OpenAI')
    def test_openai_falls_back_to_llm_key(self, mock_openai_class):
        backend = create_embedding_backend(
            Settings(embedding_backend="openai", embedding_api_key="", llm_api_key="sk-llm")
        )

        assert isinstance(backend, OpenAIEmbeddingBackend)
        assert mock_openai_class.call_args[1]["api_key"] == "sk-llm"

    def test_openai_requires_key(self):
        with pytest.raises(ValueError, match="API key required"):
            create_embedding_backend(
                Settings(embedding_backend="openai", embedding_api_key="", llm_api_key="")
            )

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown embedding backend"):
            create_embedding_backend(Settings(embedding_backend="word2vec"))

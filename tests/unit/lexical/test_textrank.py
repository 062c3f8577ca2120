"""
Unit tests for TextRank candidate extraction.
"""

import numpy as np
import pytest

from event_recommender.config import TextRankConfig
from event_recommender.lexical.textrank import (
    WeightedGraph,
    build_cooccurrence_graph,
    extract_candidates,
    pagerank,
)
from event_recommender.lexical.tokenizer import Token


SAMPLE_TEXT = "React/Next.jsを使ったフロントエンド勉強会"


@pytest.mark.unit
class TestCooccurrenceGraph:
    """Test graph construction."""

    def test_window_two_connects_all_in_triple(self):
        run = [Token("a", 0, 1), Token("b", 2, 3), Token("c", 4, 5)]
        keys, graph = build_cooccurrence_graph([run], window=2)

        assert keys == ["a", "b", "c"]
        assert graph.weight(0, 1) == graph.weight(0, 2) == graph.weight(1, 2) == 1.0
        assert graph.weight(1, 0) == graph.weight(2, 0) == graph.weight(2, 1) == 1.0
        assert graph.edge_count == 3

    def test_window_one_connects_neighbours_only(self):
        run = [Token("a", 0, 1), Token("b", 2, 3), Token("c", 4, 5)]
        _, graph = build_cooccurrence_graph([run], window=1)

        assert graph.weight(0, 1) == 1.0
        assert graph.weight(1, 2) == 1.0
        assert graph.weight(0, 2) == 0.0

    def test_no_edges_across_runs(self):
        runs = [[Token("a", 0, 1)], [Token("b", 2, 3)]]
        _, graph = build_cooccurrence_graph(runs)

        assert graph.size == 2
        assert graph.edge_count == 0

    def test_repeated_pairs_accumulate(self):
        runs = [
            [Token("react", 0, 5), Token("hooks", 6, 11)],
            [Token("react", 20, 25), Token("hooks", 26, 31)],
        ]
        keys, graph = build_cooccurrence_graph(runs)

        assert keys == ["react", "hooks"]
        assert graph.weight(0, 1) == 2.0
        assert graph.edge_count == 1

    def test_edge_count_linear_in_run_length(self):
        n = 20000
        run = [Token(f"w{i}", i, i + 1) for i in range(n)]

        _, graph = build_cooccurrence_graph([run], window=2)

        assert graph.size == n
        assert graph.edge_count == 2 * n - 3
        assert graph.weights.nbytes == 2 * graph.edge_count * 8


@pytest.mark.unit
class TestPageRank:
    """Test weighted PageRank."""

    def test_empty_graph(self):
        assert pagerank(WeightedGraph.from_pairs(0, {})).size == 0

    def test_symmetric_pair_converges_to_one(self):
        scores = pagerank(WeightedGraph.from_pairs(2, {(0, 1): 1.0}))
        assert np.allclose(scores, [1.0, 1.0])

    def test_isolated_node_gets_teleport_score(self):
        scores = pagerank(WeightedGraph.from_pairs(1, {}), damping=0.85)
        assert scores[0] == pytest.approx(0.15)

    def test_star_center_ranks_highest(self):
        graph = WeightedGraph.from_pairs(4, {(0, 1): 1.0, (0, 2): 1.0, (0, 3): 1.0})

        scores = pagerank(graph)

        assert scores[0] > scores[1]
        assert scores[1] == pytest.approx(scores[2])

    def test_weighted_edges_shift_scores(self):
        graph = WeightedGraph.from_pairs(3, {(0, 1): 3.0, (0, 2): 1.0})

        scores = pagerank(graph)

        assert scores[1] > scores[2]


@pytest.mark.unit
class TestExtractCandidates:
    """Test the full lexical extractor."""

    def test_empty_input(self):
        assert extract_candidates("") == []
        assert extract_candidates("   \n ") == []

    def test_stopwords_only_input(self):
        assert extract_candidates("参加費は無料") == []

    def test_sample_text_phrases(self):
        phrases = [c.phrase for c in extract_candidates(SAMPLE_TEXT)]

        assert phrases == ["フロントエンド勉強会", "フロントエンド", "勉強会", "React", "Next.js"]

    def test_connected_trigram_ranks_first(self):
        candidates = extract_candidates("React Hooks勉強会")

        assert candidates[0].phrase == "React Hooks勉強会"
        assert candidates[0].score == pytest.approx(3.0, abs=1e-3)

    def test_surface_form_keeps_original_spacing_and_case(self):
        phrases = [c.phrase for c in extract_candidates("React Hooks入門")]

        assert "React Hooks" in phrases
        assert "react hooks" not in phrases

    def test_ranks_are_contiguous_and_scores_descending(self):
        candidates = extract_candidates(SAMPLE_TEXT)

        assert [c.rank for c in candidates] == list(range(len(candidates)))
        scores = [c.score for c in candidates]
        assert scores == sorted(scores, reverse=True)

    def test_deterministic(self):
        text = "TypeScriptとReactで作るWebアプリ。TypeScriptの型設計も解説します。"
        assert extract_candidates(text) == extract_candidates(text)

    def test_max_candidates_bound(self):
        config = TextRankConfig(max_candidates=2)
        assert len(extract_candidates(SAMPLE_TEXT, config)) == 2

    def test_max_ngram_one_gives_single_tokens(self):
        config = TextRankConfig(max_ngram=1)
        phrases = [c.phrase for c in extract_candidates(SAMPLE_TEXT, config)]

        assert "フロントエンド勉強会" not in phrases
        assert set(phrases) == {"フロントエンド", "勉強会", "React", "Next.js"}

    def test_no_stopword_in_any_candidate(self):
        phrases = [c.phrase for c in extract_candidates("Docker勉強会の参加費は無料です")]

        assert phrases
        assert not any("無料" in p or "参加費" in p for p in phrases)

    def test_no_duplicate_phrases(self):
        text = "Python入門。Python入門の続き。"
        phrases = [c.phrase for c in extract_candidates(text)]

        assert len(phrases) == len(set(phrases))

    def test_long_text_of_distinct_tokens(self):
        text = " ".join(f"w{i}x" for i in range(20000))

        candidates = extract_candidates(text)

        assert len(candidates) == TextRankConfig().max_candidates
        assert [c.rank for c in candidates] == list(range(len(candidates)))
        assert all(len(c.phrase.split()) <= 3 for c in candidates)

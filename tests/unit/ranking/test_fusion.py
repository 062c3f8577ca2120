"""
Unit tests for rank fusion.
"""

import pytest

from event_recommender.ranking.fusion import (
    fuse_rankings,
    rank_by_similarity,
    rrf_fuse,
    rrf_fuse_hybrid,
    rrf_fuse_weighted,
)


PHRASES = [(0, 0.9), (1, 0.5)]
SENTENCES = [(1, 0.8), (0, 0.3)]


@pytest.mark.unit
class TestRankBySimilarity:
    def test_order_and_tie_break(self):
        assert rank_by_similarity([0.2, 0.9, 0.2]) == [(1, 0.9), (0, 0.2), (2, 0.2)]

    def test_empty(self):
        assert rank_by_similarity([]) == []


@pytest.mark.unit
class TestFusion:
    """Test RRF variants."""

    def test_rrf_ignores_similarity(self):
        fused = rrf_fuse([PHRASES, SENTENCES], k=60)

        # Both items hold rank 0 once and rank 1 once: tie, earlier index first
        assert [i for i, _ in fused] == [0, 1]
        assert fused[0][1] == pytest.approx(1 / 61 + 1 / 62)
        assert fused[0][1] == pytest.approx(fused[1][1])

    def test_weighted(self):
        fused = rrf_fuse_weighted([PHRASES, SENTENCES], k=60)

        assert [i for i, _ in fused] == [1, 0]
        assert fused[0][1] == pytest.approx(0.8 / 61 + 0.5 / 62)
        assert fused[1][1] == pytest.approx(0.9 / 61 + 0.3 / 62)

    def test_hybrid_extremes(self):
        plain = rrf_fuse([PHRASES, SENTENCES], k=60)
        no_sims = rrf_fuse_hybrid([PHRASES, SENTENCES], k=60, lam=0.0)
        assert [i for i, _ in no_sims] == [i for i, _ in plain]
        assert [s for _, s in no_sims] == pytest.approx([s for _, s in plain])

        sims_only = rrf_fuse_hybrid([PHRASES, SENTENCES], k=60, lam=1.0)
        assert sims_only[0][0] == 1
        assert sims_only[0][1] == pytest.approx(1.3)
        assert sims_only[1][1] == pytest.approx(1.2)

    def test_rank_position_separates_equal_similarities(self):
        ranking = [(2, 0.5), (0, 0.5), (1, 0.5)]

        fused = rrf_fuse_weighted([ranking], k=60)

        assert [i for i, _ in fused] == [2, 0, 1]

    def test_item_in_one_ranking_only(self):
        fused = rrf_fuse([[(0, 1.0), (1, 0.9)], [(0, 1.0)]], k=0)
        assert fused == [(0, 2.0), (1, 0.5)]

    @pytest.mark.parametrize("method", ["weighted", "rrf", "hybrid"])
    def test_fuse_rankings_dispatch(self, method):
        fused = fuse_rankings(method, [PHRASES, SENTENCES])
        assert sorted(i for i, _ in fused) == [0, 1]

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Unknown fuse method"):
            fuse_rankings("borda", [PHRASES])

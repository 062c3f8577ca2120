"""
Rank fusion (Reciprocal Rank Fusion and variants).

Rankings are lists of (item index, similarity) ordered best-first. Items are
identified by their position in the caller's input list, so fused ties always
resolve to the earlier input item.
"""

from typing import Dict, List, Sequence, Tuple

from event_recommender.config import FuseMethod

Scored = Tuple[int, float]


def rank_by_similarity(similarities: Sequence[float]) -> List[Scored]:
    """
    Order items by similarity desc, ties by input index.

    Examples:
        >>> rank_by_similarity([0.2, 0.9, 0.2])
        [(1, 0.9), (0, 0.2), (2, 0.2)]
    """
    order = sorted(range(len(similarities)), key=lambda i: (-similarities[i], i))
    return [(i, float(similarities[i])) for i in order]


def _sorted(agg: Dict[int, float]) -> List[Scored]:
    return sorted(agg.items(), key=lambda item: (-item[1], item[0]))


def rrf_fuse(rankings: Sequence[Sequence[Scored]], k: int = 60) -> List[Scored]:
    """Plain RRF: sum of 1 / (k + rank + 1)."""
    agg: Dict[int, float] = {}
    for ranking in rankings:
        for rank, (item, _) in enumerate(ranking):
            agg[item] = agg.get(item, 0.0) + 1.0 / (k + rank + 1)
    return _sorted(agg)


def rrf_fuse_weighted(rankings: Sequence[Sequence[Scored]], k: int = 60) -> List[Scored]:
    """Weighted RRF: sum of similarity / (k + rank + 1)."""
    agg: Dict[int, float] = {}
    for ranking in rankings:
        for rank, (item, score) in enumerate(ranking):
            agg[item] = agg.get(item, 0.0) + score / (k + rank + 1)
    return _sorted(agg)


def rrf_fuse_hybrid(
    rankings: Sequence[Sequence[Scored]], k: int = 60, lam: float = 0.5
) -> List[Scored]:
    """
    Hybrid RRF: sum of lam * similarity + (1 - lam) / (k + rank + 1).

    lam=0 is plain RRF, lam=1 uses similarities only.
    """
    agg: Dict[int, float] = {}
    for ranking in rankings:
        for rank, (item, score) in enumerate(ranking):
            agg[item] = agg.get(item, 0.0) + lam * score + (1.0 - lam) / (k + rank + 1)
    return _sorted(agg)


def fuse_rankings(
    method: FuseMethod,
    rankings: Sequence[Sequence[Scored]],
    k: int = 60,
    lam: float = 0.5,
) -> List[Scored]:
    """
    Fuse rankings with the chosen method.

    Returns:
        (item index, fused score) ordered by score desc, ties by index
    """
    if method == "weighted":
        return rrf_fuse_weighted(rankings, k)
    if method == "hybrid":
        return rrf_fuse_hybrid(rankings, k, lam)
    if method == "rrf":
        return rrf_fuse(rankings, k)
    raise ValueError(f"Unknown fuse method: {method}")

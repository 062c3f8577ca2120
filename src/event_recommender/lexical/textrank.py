"""
TextRank keyphrase extraction.

Builds an undirected co-occurrence graph over content tokens (window-based,
weighted by co-occurrence count), ranks nodes with weighted PageRank, and scores
every contiguous n-gram of adjacent tokens by the sum of its token scores.

Pure function of the input text: no network calls, deterministic ordering.
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np

from ..config import TextRankConfig
from ..models.keyphrases import CandidatePhrase
from .tokenizer import Token, split_runs, tokenize

TEXTRANK_VERSION = "textrank-1.0.0"


class WeightedGraph(NamedTuple):
    """
    Undirected weighted graph stored as a symmetric edge list.

    Every undirected edge appears twice (a -> b and b -> a), so memory grows
    with the number of edges rather than the square of the node count.
    """

    size: int
    sources: np.ndarray
    targets: np.ndarray
    weights: np.ndarray

    @classmethod
    def from_pairs(cls, size: int, pair_weights: Dict[Tuple[int, int], float]) -> "WeightedGraph":
        """Build from ``{(a, b): weight}`` with each undirected pair listed once."""
        if not pair_weights:
            empty = np.zeros(0, dtype=np.intp)
            return cls(size, empty, empty.copy(), np.zeros(0, dtype=float))
        pairs = np.array(list(pair_weights), dtype=np.intp)
        weights = np.fromiter(pair_weights.values(), dtype=float, count=len(pair_weights))
        return cls(
            size,
            np.concatenate([pairs[:, 0], pairs[:, 1]]),
            np.concatenate([pairs[:, 1], pairs[:, 0]]),
            np.concatenate([weights, weights]),
        )

    @property
    def edge_count(self) -> int:
        return len(self.weights) // 2

    def weight(self, a: int, b: int) -> float:
        mask = (self.sources == a) & (self.targets == b)
        return float(self.weights[mask].sum())

    def out_weights(self) -> np.ndarray:
        return np.bincount(self.sources, weights=self.weights, minlength=self.size)


def build_cooccurrence_graph(
    runs: List[List[Token]], window: int = 2
) -> Tuple[List[str], WeightedGraph]:
    """
    Build a weighted co-occurrence graph.

    Two tokens are connected when they appear within ``window`` positions of
    each other inside the same run. Self-loops are ignored. The edge count is
    at most ``window`` per token, so the graph stays linear in text length.

    Args:
        runs: Runs of adjacent tokens (see tokenizer.split_runs)
        window: Co-occurrence window size

    Returns:
        (node keys in first-occurrence order, graph over their indices)
    """
    index: Dict[str, int] = {}
    for run in runs:
        for token in run:
            if token.key not in index:
                index[token.key] = len(index)

    pair_weights: Dict[Tuple[int, int], float] = {}
    for run in runs:
        for i, token in enumerate(run):
            a = index[token.key]
            for other in run[i + 1 : i + window + 1]:
                b = index[other.key]
                if a != b:
                    pair = (a, b) if a < b else (b, a)
                    pair_weights[pair] = pair_weights.get(pair, 0.0) + 1.0

    return list(index), WeightedGraph.from_pairs(len(index), pair_weights)


def pagerank(
    graph: WeightedGraph,
    damping: float = 0.85,
    max_iterations: int = 30,
    tolerance: float = 1e-4,
) -> np.ndarray:
    """
    Weighted PageRank over an undirected edge-list graph.

    Update rule, applied to all nodes from the previous iteration's scores:
        s_i = (1 - d) + d * sum_j (w_ji / W_j) * s_j
    where W_j is the total outgoing weight of node j. Starts from 1.0 and stops
    when the largest change falls below ``tolerance``. Each iteration is a
    single pass over the edges.

    Returns:
        Score vector indexed by node
    """
    n = graph.size
    if n == 0:
        return np.zeros(0, dtype=float)

    source_out = graph.out_weights()[graph.sources]
    share = np.divide(
        graph.weights,
        source_out,
        out=np.zeros_like(graph.weights),
        where=source_out > 0,
    )

    scores = np.ones(n, dtype=float)
    for _ in range(max_iterations):
        incoming = np.bincount(graph.targets, weights=share * scores[graph.sources], minlength=n)
        new_scores = (1.0 - damping) + damping * incoming
        change = float(np.max(np.abs(new_scores - scores)))
        scores = new_scores
        if change < tolerance:
            break
    return scores


def extract_candidates(
    text: str, config: Optional[TextRankConfig] = None
) -> List[CandidatePhrase]:
    """
    Extract ranked candidate phrases from raw event text.

    Args:
        text: Event title and/or description (any length)
        config: TextRank options (default: TextRankConfig())

    Returns:
        CandidatePhrase list ordered by score desc, then first occurrence,
        then phrase length. Empty for empty or whitespace-only text.

    Examples:
        >>> [c.phrase for c in extract_candidates("React Hooks勉強会")][:1]
        ['React Hooks勉強会']
        >>> extract_candidates("   ")
        []
    """
    if config is None:
        config = TextRankConfig()
    if not text or not text.strip():
        return []

    stream = tokenize(
        text,
        min_length=config.min_token_length,
        use_spacy=config.use_spacy,
        spacy_model_name=config.spacy_model_name,
    )
    runs = split_runs(stream)
    if not runs:
        return []

    keys, graph = build_cooccurrence_graph(runs, window=config.window)
    scores = pagerank(
        graph,
        damping=config.damping,
        max_iterations=config.max_iterations,
        tolerance=config.tolerance,
    )
    node_score = dict(zip(keys, scores.tolist()))

    # key tuple -> (score, first position, n, rendered phrase)
    phrases: Dict[Tuple[str, ...], Tuple[float, int, int, str]] = {}
    position = 0
    for run in runs:
        for i in range(len(run)):
            for n in range(1, config.max_ngram + 1):
                if i + n > len(run):
                    break
                gram = run[i : i + n]
                key = tuple(t.key for t in gram)
                if key in phrases:
                    continue
                surface = text[gram[0].start : gram[-1].end]
                score = sum(node_score[k] for k in key)
                phrases[key] = (score, position + i, n, surface)
        position += len(run)

    ordered = sorted(phrases.values(), key=lambda p: (-p[0], p[1], p[2]))

    candidates: List[CandidatePhrase] = []
    seen_surfaces = set()
    for score, _, _, surface in ordered:
        if surface in seen_surfaces:
            continue
        seen_surfaces.add(surface)
        candidates.append(
            CandidatePhrase(phrase=surface, score=round(score, 6), rank=len(candidates))
        )
        if len(candidates) >= config.max_candidates:
            break
    return candidates

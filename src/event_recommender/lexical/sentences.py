"""
Key sentence extraction with sentence-level TextRank.

Sentences are graph nodes, edges are weighted by the Jaccard similarity of their
content-token sets, and nodes are ranked with the same weighted PageRank used for
keyphrases. The result feeds ``EventKeyData.key_sentences``.
"""

import re
from typing import List, Optional

from ..config import TextRankConfig
from .textrank import WeightedGraph, pagerank
from .tokenizer import tokenize

# Sentence terminators; a period only ends a sentence when followed by whitespace
# so "Next.js" and "v1.2" stay intact.
SENTENCE_SPLIT = re.compile(r"(?<=[。！？!?])|(?<=\.)(?=\s)|\n+")
_PUNCT_AND_SPACE = re.compile(r"[。！？.!?、,\s]")


def split_sentences(text: str, min_length: int = 10) -> List[str]:
    """
    Split text into sentences, dropping ones that are too short.

    Args:
        text: Input text
        min_length: Minimum characters after removing punctuation and spaces

    Examples:
        >>> split_sentences("Next.jsの基礎を学びます。ハンズオン形式でアプリを作ります。", min_length=5)
        ['Next.jsの基礎を学びます。', 'ハンズオン形式でアプリを作ります。']
    """
    sentences = []
    for raw in SENTENCE_SPLIT.split(text):
        sentence = raw.strip()
        if not sentence:
            continue
        if len(_PUNCT_AND_SPACE.sub("", sentence)) < min_length:
            continue
        sentences.append(sentence)
    return sentences


def jaccard(a: set, b: set) -> float:
    """Jaccard coefficient of two token sets (0.0 when either is empty)."""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def extract_key_sentences(text: str, config: Optional[TextRankConfig] = None) -> List[str]:
    """
    Extract the most central sentences of a text.

    Args:
        text: Event description
        config: TextRank options (max_sentences, min_sentence_length, ...)

    Returns:
        Up to ``config.max_sentences`` sentences ordered by score desc, ties by
        original position. Texts with fewer than two sentences are returned
        as-is.
    """
    if config is None:
        config = TextRankConfig()
    if not text or not text.strip():
        return []

    sentences = split_sentences(text, min_length=config.min_sentence_length)
    if len(sentences) < 2:
        return sentences[: config.max_sentences]

    token_sets = []
    kept = []
    for sentence in sentences:
        stream = tokenize(
            sentence,
            min_length=config.min_token_length,
            use_spacy=config.use_spacy,
            spacy_model_name=config.spacy_model_name,
        )
        keys = {t.key for t in stream if t is not None}
        if keys:
            token_sets.append(keys)
            kept.append(sentence)

    n = len(kept)
    pair_weights = {}
    for i in range(n):
        for j in range(i + 1, n):
            sim = jaccard(token_sets[i], token_sets[j])
            if sim > 0:
                pair_weights[(i, j)] = sim

    scores = pagerank(
        WeightedGraph.from_pairs(n, pair_weights),
        damping=config.damping,
        max_iterations=config.max_iterations,
        tolerance=config.tolerance,
    )
    order = sorted(range(n), key=lambda i: (-scores[i], i))
    return [kept[i] for i in order[: config.max_sentences]]

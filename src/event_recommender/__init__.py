"""
Event keyphrase extraction and relevance ranking.

Two-stage keyphrase extraction (TextRank candidates refined by an LLM, cached
and reconciled with lexical fallbacks) and tag-to-event relevance ranking over
the extracted key phrases and key sentences.
"""

__version__ = "1.0.0"

"""
Lexical keyphrase extraction (TextRank family).

Public API for turning raw event text into ranked candidate phrases and key
sentences without any external calls.
"""

from .sentences import extract_key_sentences, split_sentences
from .stopwords import STOPLIST_VERSION
from .textrank import TEXTRANK_VERSION, extract_candidates
from .tokenizer import TOKENIZER_VERSION

__all__ = [
    "extract_candidates",
    "extract_key_sentences",
    "split_sentences",
    "TEXTRANK_VERSION",
    "TOKENIZER_VERSION",
    "STOPLIST_VERSION",
]

"""
Deterministic tokenizer for Japanese/English technical event text.

Produces a token stream in which ``None`` marks a phrase boundary. Tokens keep
their character offsets so multi-token phrases can be rendered from the source
text verbatim ("React Hooks", "フロントエンド勉強会").

Two paths:
- regex (default): Latin technical terms, katakana runs and kanji runs are
  tokens; hiragana (particles, okurigana), punctuation and line breaks are
  boundaries.
- spaCy (optional): nouns, proper nouns and adjectives are tokens; everything
  else is a boundary.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Set

import spacy
import structlog
from spacy.language import Language

from .stopwords import STOPWORDS

logger = structlog.get_logger(__name__)

TOKENIZER_VERSION = "tokenizer-ja-en-1.0.0"

# Latin technical terms: Next.js, C++, C#, node-red, Vue3, GPT-4o
_LATIN = r"[A-Za-z][A-Za-z0-9]*(?:[.\-][A-Za-z0-9]+)*[+#]*"
_KATAKANA = r"[ァ-ヺー]+"
_KANJI = r"[一-鿿々]+"
TOKEN_PATTERN = re.compile(f"{_LATIN}|{_KATAKANA}|{_KANJI}")

SPACY_CONTENT_POS = frozenset({"NOUN", "PROPN", "ADJ"})

# Singleton for spaCy model
_spacy_model: Optional[Language] = None


@dataclass(frozen=True)
class Token:
    """A content token with its offsets in the source text."""

    key: str  # Normalized form used as graph node
    start: int
    end: int


TokenStream = List[Optional[Token]]


def get_spacy_model(model_name: str) -> Language:
    """
    Get or initialize spaCy model (singleton pattern).

    Args:
        model_name: Installed spaCy pipeline name (e.g., ja_core_news_sm)

    Returns:
        Initialized spaCy Language instance

    Raises:
        OSError: If spaCy model is not installed
    """
    global _spacy_model
    if _spacy_model is None:
        try:
            _spacy_model = spacy.load(model_name)
        except OSError as e:
            raise OSError(
                f"spaCy model '{model_name}' not found. "
                f"Please install it with: python -m spacy download {model_name}"
            ) from e
    return _spacy_model


def _is_content(
    surface: str, min_length: int, stopwords: Set[str]
) -> bool:
    if len(surface) < min_length:
        return False
    if surface.isdigit():
        return False
    return surface.casefold() not in stopwords


def _append_boundary(stream: TokenStream) -> None:
    if stream and stream[-1] is not None:
        stream.append(None)


def tokenize_regex(
    text: str, min_length: int = 2, stopwords: Optional[Set[str]] = None
) -> TokenStream:
    """
    Tokenize text with the regex tokenizer.

    Args:
        text: Input text
        min_length: Minimum token length in characters
        stopwords: Stopword set (default: STOPWORDS)

    Returns:
        Token stream with None boundaries (no leading/trailing/double boundaries)

    Examples:
        >>> [t.key if t else None for t in tokenize_regex("React Hooks入門")]
        ['react', 'hooks', '入門']
        >>> [t.key if t else None for t in tokenize_regex("React/Next.jsを使う")]
        ['react', None, 'next.js']
    """
    if stopwords is None:
        stopwords = STOPWORDS

    stream: TokenStream = []
    prev_end = 0
    for match in TOKEN_PATTERN.finditer(text):
        gap = text[prev_end : match.start()]
        if gap.strip() or "\n" in gap:
            _append_boundary(stream)
        prev_end = match.end()

        surface = match.group(0)
        if _is_content(surface, min_length, stopwords):
            stream.append(Token(key=surface.casefold(), start=match.start(), end=match.end()))
        else:
            _append_boundary(stream)

    if stream and stream[-1] is None:
        stream.pop()
    return stream


def tokenize_spacy(
    text: str,
    model_name: str,
    min_length: int = 2,
    stopwords: Optional[Set[str]] = None,
) -> TokenStream:
    """
    Tokenize text with spaCy, keeping nouns, proper nouns and adjectives.

    Raises:
        OSError: If the spaCy model is not installed
    """
    if stopwords is None:
        stopwords = STOPWORDS

    nlp = get_spacy_model(model_name)
    stream: TokenStream = []
    for tok in nlp(text):
        if tok.is_space:
            if "\n" in tok.text:
                _append_boundary(stream)
            continue
        if tok.pos_ in SPACY_CONTENT_POS and _is_content(tok.text, min_length, stopwords):
            key = (tok.lemma_ or tok.text).casefold()
            stream.append(Token(key=key, start=tok.idx, end=tok.idx + len(tok.text)))
        else:
            _append_boundary(stream)

    if stream and stream[-1] is None:
        stream.pop()
    return stream


def tokenize(
    text: str,
    min_length: int = 2,
    use_spacy: bool = False,
    spacy_model_name: str = "ja_core_news_sm",
) -> TokenStream:
    """
    Tokenize text into a boundary-delimited token stream.

    When ``use_spacy`` is set but the model is not installed, falls back to the
    regex tokenizer so lexical extraction always succeeds.
    """
    if use_spacy:
        try:
            return tokenize_spacy(text, spacy_model_name, min_length=min_length)
        except OSError as e:
            logger.warning("spacy_unavailable_using_regex", model=spacy_model_name, error=str(e))
    return tokenize_regex(text, min_length=min_length)


def split_runs(stream: TokenStream) -> List[List[Token]]:
    """
    Split a token stream at boundaries into runs of adjacent tokens.

    Examples:
        >>> a, b, c = Token("a", 0, 1), Token("b", 2, 3), Token("c", 4, 5)
        >>> split_runs([a, b, None, c])
        [[Token(key='a', start=0, end=1), Token(key='b', start=2, end=3)], [Token(key='c', start=4, end=5)]]
    """
    runs: List[List[Token]] = []
    current: List[Token] = []
    for token in stream:
        if token is None:
            if current:
                runs.append(current)
            current = []
        else:
            current.append(token)
    if current:
        runs.append(current)
    return runs

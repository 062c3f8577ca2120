"""
Semantic enhancement, caching and reconciliation of keyphrases.
"""

from .cache import CacheStats, InMemoryResultCache, ResultCache, fingerprint
from .enhancer import EnhancementError, EnhancementOutcome, SemanticEnhancer
from .parsing import EnhancementReply, ReplyParseError, extract_json_object, parse_enhancement_reply
from .pipeline import KeyphrasePipeline, build_pipeline
from .prompts import PROMPT_VERSION, build_enhancement_prompt
from .reconciler import merge

__all__ = [
    "CacheStats",
    "InMemoryResultCache",
    "ResultCache",
    "fingerprint",
    "EnhancementError",
    "EnhancementOutcome",
    "SemanticEnhancer",
    "EnhancementReply",
    "ReplyParseError",
    "extract_json_object",
    "parse_enhancement_reply",
    "KeyphrasePipeline",
    "build_pipeline",
    "PROMPT_VERSION",
    "build_enhancement_prompt",
    "merge",
]

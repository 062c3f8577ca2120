"""
Staged parsing of free-text LLM replies.

1. Extraction - locate the first balanced {...} span in the reply
2. JSON Parse - decode the span
3. Schema Validation - Pydantic model validation

Any stage failing is a hard failure for the attempt (ReplyParseError), never a
silent empty result.
"""

import json
from typing import List, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator


logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


class ReplyParseError(ValueError):
    """Raised when an LLM reply does not contain the expected structured data."""


# ============================================================================
# REPLY SCHEMAS
# ============================================================================

class ReplyPhrase(BaseModel):
    """One curated phrase as returned by the model."""

    phrase: str = Field(..., min_length=1)
    score: Optional[float] = None
    reason: str = ""

    @field_validator("phrase")
    @classmethod
    def strip_phrase(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("phrase must not be blank")
        return v

    @field_validator("reason", mode="before")
    @classmethod
    def coerce_reason(cls, v):
        return "" if v is None else str(v)


class EnhancementReply(BaseModel):
    """Structured reply of the enhancement prompt."""

    enhanced_keyphrases: List[ReplyPhrase]


# ============================================================================
# EXTRACTION
# ============================================================================

def extract_json_object(text: str) -> str:
    """
    Return the first balanced brace-delimited span of ``text``.

    Braces inside JSON strings (including escaped quotes) are ignored.

    Raises:
        ReplyParseError: If no opening brace exists or it is never closed

    Examples:
        >>> extract_json_object('Sure! {"a": {"b": "}"}} trailing')
        '{"a": {"b": "}"}}'
    """
    start = text.find("{")
    if start == -1:
        raise ReplyParseError("No JSON object found in reply")

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    raise ReplyParseError("Unbalanced JSON object in reply")


# ============================================================================
# PARSING
# ============================================================================

def parse_reply(text: str, schema: Type[M]) -> M:
    """
    Extract, decode and validate a structured reply.

    Args:
        text: Raw model reply
        schema: Pydantic model the JSON object must satisfy

    Returns:
        Validated model instance

    Raises:
        ReplyParseError: On any extraction, JSON or schema failure
    """
    span = extract_json_object(text)

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise ReplyParseError(f"Invalid JSON: {e}") from e

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        violations = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ReplyParseError(f"Schema violation: {violations}") from e


def parse_enhancement_reply(text: str) -> EnhancementReply:
    """Parse the reply of the keyphrase enhancement prompt."""
    reply = parse_reply(text, EnhancementReply)
    logger.debug("enhancement_reply_parsed", phrases=len(reply.enhanced_keyphrases))
    return reply

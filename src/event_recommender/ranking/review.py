"""
Optional LLM review of ranked recommendations.

The model sees the interest tag and the top candidates (id, title, key phrases)
and returns which ids to keep, optionally with a reason. Fused order is kept;
the model only filters and rewrites reasons.
"""

import json
from typing import List, Sequence

from pydantic import BaseModel, Field

from event_recommender.enhancement.parsing import parse_reply
from event_recommender.llm.llm_client import LLMClient, call_with_timeout
from event_recommender.models.events import EventKeyData, RecommendedEvent


REVIEW_SYSTEM_PROMPT = (
    "あなたは学生エンジニア向けイベントの推薦アシスタントです。"
    "与えられた興味タグとイベント候補リストをもとに、ユーザーに本当に推薦すべきイベントのみを選んでください。"
    "回答は厳密なJSONオブジェクトのみとし、説明や余分なテキストは一切含めないでください。"
    "候補がない場合は recommendations を空配列にしてください。"
)

REVIEW_TEMPLATE = """# 興味タグ
{tag}

# イベント候補(JSON)
```json
{candidates}
```

推薦すべきイベントを次の形式で回答してください:
{{"recommendations": [{{"id": "event-id-1", "reason": "推薦理由"}}]}}
"""


class ReviewedItem(BaseModel):
    id: str = Field(..., min_length=1)
    reason: str = ""


class ReviewReply(BaseModel):
    recommendations: List[ReviewedItem] = Field(default_factory=list)


def build_review_prompt(tag: str, events: Sequence[EventKeyData]) -> str:
    candidates = [
        {"id": ev.id, "title": ev.title, "keyPhrases": ev.key_phrases}
        for ev in events
    ]
    return REVIEW_TEMPLATE.format(
        tag=tag,
        candidates=json.dumps(candidates, ensure_ascii=False, indent=2),
    )


def review_recommendations(
    llm_client: LLMClient,
    tag: str,
    recommended: Sequence[RecommendedEvent],
    events: Sequence[EventKeyData],
    timeout_seconds: float,
) -> List[RecommendedEvent]:
    """
    Filter recommendations through the LLM.

    Args:
        llm_client: Transport
        tag: Interest tag or query
        recommended: Ranked recommendations (fused order)
        events: Source events aligned with ``recommended``
        timeout_seconds: Per-call timeout

    Returns:
        Subset of ``recommended`` in the same order, reasons replaced when given

    Raises:
        LLMTimeoutError, ReplyParseError, or transport errors
    """
    if not recommended:
        return []

    prompt = build_review_prompt(tag, events)
    response = call_with_timeout(
        lambda: llm_client.generate(prompt, system_prompt=REVIEW_SYSTEM_PROMPT),
        timeout_seconds,
    )
    reply = parse_reply(response.text, ReviewReply)

    reasons = {}
    for item in reply.recommendations:
        reasons.setdefault(item.id, item.reason.strip())

    reviewed = []
    for rec in recommended:
        if rec.id not in reasons:
            continue
        reason = reasons[rec.id] or rec.relevance_reason
        reviewed.append(rec.model_copy(update={"relevance_reason": reason}))
    return reviewed

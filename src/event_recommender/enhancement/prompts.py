"""
Prompt management for semantic keyphrase enhancement.

The instruction is written in Japanese because event descriptions are mostly
Japanese; the model is asked to curate the TextRank candidates and reply with a
single JSON object.
"""

from typing import List, Optional, Sequence

from event_recommender.config import EnhancementConfig


# ============================================================================
# PROMPT VERSIONS
# ============================================================================

PROMPT_VERSION = "keyphrase-enhance-v1"


# ============================================================================
# SYSTEM PROMPT
# ============================================================================

SYSTEM_PROMPT = (
    "You curate keyphrases for technical event listings. "
    "Reply with exactly one JSON object and no other text."
)


# ============================================================================
# USER PROMPT BUILDER
# ============================================================================

ENHANCEMENT_TEMPLATE = """
あなたは日本のIT・技術イベントの専門家です。以下のイベント説明文と、TextRankアルゴリズムで抽出されたキーフレーズを分析し、より関連性の高いキーフレーズに改善してください。

【イベント説明文】
{text}

【TextRank抽出結果】
{candidates}

【改善指示】
1. 技術用語・プログラミング言語・フレームワーク名を優先
2. 重複や類似表現を統合
3. 一般的すぎる単語（「学習」「開催」等）は除外
4. 20文字以内の短縮形を推奨
5. 最大{max_phrases}個まで厳選

【出力形式】（JSON形式で回答）
{{
  "enhanced_keyphrases": [
    {{
      "phrase": "キーフレーズ",
      "score": 0.85,
      "reason": "選択理由"
    }}
  ]
}}
"""


def format_candidates(phrases: Sequence[str]) -> str:
    """
    Format candidate phrases as a numbered list.

    Examples:
        >>> format_candidates(["React", "Next.js"])
        '1. React\\n2. Next.js'
    """
    return "\n".join(f"{i}. {phrase}" for i, phrase in enumerate(phrases, 1))


def build_enhancement_prompt(
    text: str,
    candidates: List[str],
    config: Optional[EnhancementConfig] = None,
) -> str:
    """
    Build the enhancement instruction.

    Args:
        text: Raw event text (truncated to ``config.prompt_max_text_length``)
        candidates: Lexical candidate phrases in rank order
        config: Enhancement options

    Returns:
        Prompt string
    """
    if config is None:
        config = EnhancementConfig()

    return ENHANCEMENT_TEMPLATE.format(
        text=text[: config.prompt_max_text_length],
        candidates=format_candidates(candidates),
        max_phrases=config.llm_max_phrases,
    )

"""
Unit tests for enhancement prompt building.
"""

import pytest

from event_recommender.config import EnhancementConfig
from event_recommender.enhancement.prompts import build_enhancement_prompt, format_candidates


@pytest.mark.unit
class TestPrompts:
    def test_format_candidates(self):
        assert format_candidates(["React", "Next.js"]) == "1. React\n2. Next.js"
        assert format_candidates([]) == ""

    def test_text_truncated(self):
        prompt = build_enhancement_prompt("あ" * 50, ["React"], EnhancementConfig(prompt_max_text_length=10))

        assert "あ" * 10 in prompt
        assert "あ" * 11 not in prompt

    def test_max_phrases_and_reply_format(self):
        prompt = build_enhancement_prompt("Go勉強会", ["Go"], EnhancementConfig(llm_max_phrases=5))

        assert "最大5個まで厳選" in prompt
        assert '"enhanced_keyphrases"' in prompt
        assert "{{" not in prompt

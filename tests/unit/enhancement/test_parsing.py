"""
Unit tests for staged LLM reply parsing.
"""

import pytest

from event_recommender.enhancement.parsing import (
    EnhancementReply,
    ReplyParseError,
    extract_json_object,
    parse_enhancement_reply,
)


@pytest.mark.unit
class TestExtractJsonObject:
    """Test balanced-brace span extraction."""

    def test_surrounding_chatter(self):
        text = 'Here you go:\n```json\n{"enhanced_keyphrases": []}\n```\nHope it helps!'
        assert extract_json_object(text) == '{"enhanced_keyphrases": []}'

    def test_nested_objects(self):
        text = 'x {"a": {"b": {"c": 1}}} {"second": 2}'
        assert extract_json_object(text) == '{"a": {"b": {"c": 1}}}'

    def test_braces_inside_strings_ignored(self):
        text = '{"phrase": "a } b { c"} tail'
        assert extract_json_object(text) == '{"phrase": "a } b { c"}'

    def test_escaped_quotes_inside_strings(self):
        text = r'{"reason": "say \"}\" twice"} tail'
        assert extract_json_object(text) == r'{"reason": "say \"}\" twice"}'

    def test_no_object(self):
        with pytest.raises(ReplyParseError, match="No JSON object"):
            extract_json_object("I cannot help with that.")

    def test_unbalanced(self):
        with pytest.raises(ReplyParseError, match="Unbalanced"):
            extract_json_object('{"enhanced_keyphrases": [{"phrase": "React"}')


@pytest.mark.unit
class TestParseEnhancementReply:
    """Test JSON decoding and schema validation stages."""

    def test_valid_reply(self, make_reply):
        reply = parse_enhancement_reply(make_reply(("Next.js", 0.9), ("React", 0.85)))

        assert isinstance(reply, EnhancementReply)
        assert [p.phrase for p in reply.enhanced_keyphrases] == ["Next.js", "React"]
        assert reply.enhanced_keyphrases[0].score == 0.9

    def test_missing_score_and_null_reason(self):
        reply = parse_enhancement_reply(
            '{"enhanced_keyphrases": [{"phrase": " Docker ", "reason": null}]}'
        )

        item = reply.enhanced_keyphrases[0]
        assert item.phrase == "Docker"
        assert item.score is None
        assert item.reason == ""

    def test_invalid_json(self):
        with pytest.raises(ReplyParseError, match="Invalid JSON"):
            parse_enhancement_reply("{enhanced_keyphrases: [phrase: React]}")

    def test_missing_field(self):
        with pytest.raises(ReplyParseError, match="Schema violation"):
            parse_enhancement_reply('{"keyphrases": ["React"]}')

    def test_blank_phrase(self):
        with pytest.raises(ReplyParseError, match="Schema violation"):
            parse_enhancement_reply('{"enhanced_keyphrases": [{"phrase": "   ", "score": 0.5}]}')

    def test_non_numeric_score(self):
        with pytest.raises(ReplyParseError, match="Schema violation"):
            parse_enhancement_reply('{"enhanced_keyphrases": [{"phrase": "Go", "score": "high"}]}')

    def test_empty_list_is_valid(self):
        assert parse_enhancement_reply('{"enhanced_keyphrases": []}').enhanced_keyphrases == []

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_enhancement_reply("")

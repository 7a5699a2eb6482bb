"""ResponseParser and parse strategy tests.

Covers exact JSON, JSON wrapped in prose or code fences, missing arrays,
and field defaulting.
"""

from __future__ import annotations

import json

import pytest

from src.tweetdesk.tweets.errors import UnparseableGenerationResponse
from src.tweetdesk.tweets.generation.parser import (
    ExtractBracketedArray,
    ResponseParser,
    StrictParse,
)


TWO_TWEETS = [
    {"category": "Governance", "content": "Proposal review process adopted #governance"},
    {"category": "Community", "content": "Grant applications open April 1 #community"},
]


# ── ResponseParser ────────────────────────────────────────────────────────────


def test_exact_json_array():
    tweets = ResponseParser().parse(json.dumps(TWO_TWEETS))

    assert [(t.category, t.content) for t in tweets] == [
        (item["category"], item["content"]) for item in TWO_TWEETS
    ]


def test_surrounding_whitespace_is_ignored():
    tweets = ResponseParser().parse("\n\n  " + json.dumps(TWO_TWEETS) + "  \n")
    assert len(tweets) == 2


def test_array_wrapped_in_prose():
    raw = "Here you go:\n" + json.dumps(TWO_TWEETS, indent=2) + "\nHope that helps!"
    tweets = ResponseParser().parse(raw)

    assert len(tweets) == 2
    assert tweets[1].category == "Community"


def test_array_inside_code_fence():
    raw = "```json\n" + json.dumps(TWO_TWEETS) + "\n```"
    tweets = ResponseParser().parse(raw)
    assert [t.category for t in tweets] == ["Governance", "Community"]


def test_no_array_raises_unparseable():
    with pytest.raises(UnparseableGenerationResponse) as exc_info:
        ResponseParser().parse("I could not find anything tweet-worthy.")

    assert exc_info.value.raw_text == "I could not find anything tweet-worthy."
    assert exc_info.value.reason == "unparseable_generation_response"


def test_empty_array_is_unparseable():
    with pytest.raises(UnparseableGenerationResponse):
        ResponseParser().parse("[]")


def test_array_of_non_objects_is_unparseable():
    with pytest.raises(UnparseableGenerationResponse):
        ResponseParser().parse('["just", "strings"]')


def test_broken_json_inside_brackets_is_unparseable():
    with pytest.raises(UnparseableGenerationResponse):
        ResponseParser().parse('Result: [{"category": "Growth", "content": }]')


def test_missing_fields_default_to_empty_string():
    tweets = ResponseParser().parse('[{"content": "Only content"}, {"category": null}]')

    assert tweets[0].category == ""
    assert tweets[0].content == "Only content"
    assert tweets[1].content == ""


def test_extra_keys_are_ignored():
    raw = '[{"category": "Growth", "content": "Up 20%", "hashtags": ["#growth"], "score": 9}]'
    tweets = ResponseParser().parse(raw)

    assert len(tweets) == 1
    assert tweets[0].model_dump() == {"category": "Growth", "content": "Up 20%"}


def test_non_string_values_are_stringified():
    tweets = ResponseParser().parse('[{"category": 7, "content": true}]')
    assert tweets[0].category == "7"
    assert tweets[0].content == "True"


def test_custom_strategy_order():
    parser = ResponseParser(strategies=(StrictParse(),))
    with pytest.raises(UnparseableGenerationResponse):
        parser.parse("noise " + json.dumps(TWO_TWEETS))


# ── Individual Strategies ─────────────────────────────────────────────────────


class TestStrictParse:
    def test_accepts_whole_array(self):
        assert len(StrictParse().parse(json.dumps(TWO_TWEETS))) == 2

    def test_declines_wrapped_array(self):
        assert StrictParse().parse("Sure! " + json.dumps(TWO_TWEETS)) is None

    def test_declines_object(self):
        assert StrictParse().parse('{"category": "Growth"}') is None


class TestExtractBracketedArray:
    def test_spans_multiple_lines(self):
        raw = "prefix\n[\n  {\"category\": \"A\",\n   \"content\": \"B\"}\n]\nsuffix"
        tweets = ExtractBracketedArray().parse(raw)
        assert tweets is not None
        assert tweets[0].content == "B"

    def test_declines_without_object_array(self):
        assert ExtractBracketedArray().parse("[1, 2, 3]") is None

    def test_greedy_span_covers_all_objects(self):
        raw = "A: " + json.dumps(TWO_TWEETS) + " end"
        tweets = ExtractBracketedArray().parse(raw)
        assert tweets is not None
        assert len(tweets) == 2

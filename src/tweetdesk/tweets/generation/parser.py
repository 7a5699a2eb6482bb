"""Tolerant recovery of {category, content} pairs from model output.

Models are asked for a bare JSON array but often wrap it in prose or code
fences. ResponseParser tries an ordered list of strategies and returns the
first success:

1. StrictParse -- the whole trimmed text is the array.
2. ExtractBracketedArray -- the greedy ``[ {...} ]`` span, spanning lines.

Each strategy returns None when it does not apply; if none applies the
parser raises UnparseableGenerationResponse.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

import structlog

from src.tweetdesk.tweets.errors import UnparseableGenerationResponse
from src.tweetdesk.tweets.schemas import GeneratedTweet

logger = structlog.get_logger(__name__)

_BRACKETED_ARRAY = re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _to_generated_tweets(data: Any) -> list[GeneratedTweet] | None:
    """Coerce a decoded JSON value into tweets, or None if it is not a
    non-empty array of objects."""
    if not isinstance(data, list) or not data:
        return None
    if not all(isinstance(item, dict) for item in data):
        return None
    return [
        GeneratedTweet(
            category=_as_text(item.get("category")),
            content=_as_text(item.get("content")),
        )
        for item in data
    ]


class ParseStrategy(Protocol):
    name: str

    def parse(self, raw_text: str) -> list[GeneratedTweet] | None: ...


class StrictParse:
    """The entire response, whitespace trimmed, is a JSON array of objects."""

    name = "strict"

    def parse(self, raw_text: str) -> list[GeneratedTweet] | None:
        try:
            data = json.loads(raw_text.strip())
        except ValueError:
            return None
        return _to_generated_tweets(data)


class ExtractBracketedArray:
    """Pull the widest ``[ {`` ... ``} ]`` span out of surrounding noise."""

    name = "bracketed_array"

    def parse(self, raw_text: str) -> list[GeneratedTweet] | None:
        match = _BRACKETED_ARRAY.search(raw_text)
        if match is None:
            return None
        try:
            data = json.loads(match.group(0))
        except ValueError:
            return None
        return _to_generated_tweets(data)


DEFAULT_STRATEGIES: tuple[ParseStrategy, ...] = (StrictParse(), ExtractBracketedArray())


class ResponseParser:
    """Applies parse strategies in order; first success wins."""

    def __init__(self, strategies: tuple[ParseStrategy, ...] | None = None) -> None:
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def parse(self, raw_text: str) -> list[GeneratedTweet]:
        """Recover tweet suggestions from raw model output.

        Raises:
            UnparseableGenerationResponse: If no strategy yields a non-empty
                array of objects.
        """
        for strategy in self.strategies:
            tweets = strategy.parse(raw_text)
            if tweets is not None:
                logger.debug(
                    "generation.response_parsed",
                    strategy=strategy.name,
                    count=len(tweets),
                )
                return tweets

        logger.warning(
            "generation.response_unparseable",
            response_preview=raw_text[:200],
        )
        raise UnparseableGenerationResponse(
            "Failed to extract a JSON array of tweets from the model response",
            raw_text=raw_text,
        )

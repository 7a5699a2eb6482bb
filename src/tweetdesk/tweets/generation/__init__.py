"""Transcript-to-tweet generation pipeline.

GenerationAdapter asks the language model for categorized tweet suggestions,
ResponseParser recovers {category, content} pairs from its raw text, and
GenerationQueue runs the pair in the background for each new transcript,
recording the outcome on the transcript.
"""

from src.tweetdesk.tweets.generation.adapter import GenerationAdapter
from src.tweetdesk.tweets.generation.parser import (
    ExtractBracketedArray,
    ResponseParser,
    StrictParse,
)
from src.tweetdesk.tweets.generation.queue import GenerationQueue

__all__ = [
    "ExtractBracketedArray",
    "GenerationAdapter",
    "GenerationQueue",
    "ResponseParser",
    "StrictParse",
]

"""REST endpoints for transcripts and their generated tweets.

Creating a transcript returns immediately; tweet generation runs in the
background and its progress shows on the transcript's generationStatus.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status

from src.tweetdesk.api.deps import (
    get_app_settings,
    get_transcript_service,
    require_operator,
    to_http_exception,
)
from src.tweetdesk.config import Settings
from src.tweetdesk.tweets.errors import TweetDeskError
from src.tweetdesk.tweets.schemas import TranscriptCreate
from src.tweetdesk.tweets.transcripts import read_sample_transcript

router = APIRouter(
    prefix="/api/transcripts",
    tags=["transcripts"],
    dependencies=[Depends(require_operator)],
)


@router.get("/sample/transcript")
async def get_sample_transcript(
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Return the bundled sample transcript text."""
    try:
        content = await read_sample_transcript(settings.SAMPLE_TRANSCRIPT_PATH)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"content": content}


@router.get("")
async def list_transcripts(service: Any = Depends(get_transcript_service)) -> list[dict]:
    try:
        transcripts = await service.list()
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return [t.to_record() for t in transcripts]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_transcript(
    body: TranscriptCreate,
    service: Any = Depends(get_transcript_service),
) -> dict:
    """Store a transcript and schedule tweet generation for it."""
    try:
        transcript = await service.create(body)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "transcript": transcript.to_record()}


@router.get("/{transcript_id}")
async def get_transcript(
    transcript_id: str,
    service: Any = Depends(get_transcript_service),
) -> dict:
    try:
        transcript = await service.get(transcript_id)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return transcript.to_record()


@router.get("/{transcript_id}/tweets")
async def list_transcript_tweets(
    transcript_id: str,
    service: Any = Depends(get_transcript_service),
) -> list[dict]:
    """Tweets generated for the transcript, in generation order."""
    try:
        tweets = await service.list_tweets(transcript_id)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return [t.to_record() for t in tweets]


@router.get("/{transcript_id}/tweets/by-category")
async def list_transcript_tweets_by_category(
    transcript_id: str,
    service: Any = Depends(get_transcript_service),
) -> dict[str, list[dict]]:
    try:
        grouped = await service.tweets_by_category(transcript_id)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {
        category: [t.to_record() for t in tweets]
        for category, tweets in grouped.items()
    }

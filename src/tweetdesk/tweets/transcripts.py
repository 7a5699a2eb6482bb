"""TranscriptService -- transcript intake and transcript-scoped tweet views.

Creating a transcript stores it and hands it to the GenerationQueue; the
caller gets the stored transcript back straight away with
generation_status ``pending``. Transcripts are never updated or deleted
here; only the queue writes the generation fields.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from src.tweetdesk.tweets.errors import (
    NotFoundError,
    StoreUnavailable,
    TranscriptNotFound,
    TranscriptTooLarge,
)
from src.tweetdesk.tweets.generation.queue import GenerationQueue
from src.tweetdesk.tweets.lifecycle import TweetLifecycleManager, group_by_category
from src.tweetdesk.tweets.repository import RecordKind, RecordStore
from src.tweetdesk.tweets.schemas import Transcript, TranscriptCreate, Tweet

logger = structlog.get_logger(__name__)


class TranscriptService:
    """Stores transcripts and schedules their tweet generation.

    Args:
        store: RecordStore holding the transcripts collection.
        queue: GenerationQueue for background generation.
        lifecycle: TweetLifecycleManager for tweet reads.
        max_chars: Upper bound on transcript content length.
    """

    def __init__(
        self,
        store: RecordStore,
        queue: GenerationQueue,
        lifecycle: TweetLifecycleManager,
        max_chars: int = 5_000_000,
    ) -> None:
        self._store = store
        self._queue = queue
        self._lifecycle = lifecycle
        self._max_chars = max_chars

    async def create(self, data: TranscriptCreate) -> Transcript:
        """Persist a transcript and submit it for tweet generation.

        Raises:
            TranscriptTooLarge: content exceeds max_chars.
            StoreUnavailable: the transcript could not be stored.
        """
        size = len(data.content)
        if size > self._max_chars:
            raise TranscriptTooLarge(size, self._max_chars)

        transcript = Transcript(title=data.title, date=data.date, content=data.content)
        await self._store.append(RecordKind.TRANSCRIPTS, transcript)

        logger.info(
            "transcript.created",
            transcript_id=transcript.id,
            content_chars=size,
        )
        self._queue.submit(transcript)
        return transcript

    async def list(self) -> list[Transcript]:
        return await self._store.list_all(RecordKind.TRANSCRIPTS)

    async def get(self, transcript_id: str) -> Transcript:
        transcript = await self._store.get_by_id(RecordKind.TRANSCRIPTS, transcript_id)
        if transcript is None:
            raise TranscriptNotFound(transcript_id)
        return transcript

    async def list_tweets(self, transcript_id: str) -> list[Tweet]:
        """Tweets generated for a transcript; TranscriptNotFound if absent."""
        await self.get(transcript_id)
        return await self._lifecycle.list_for_transcript(transcript_id)

    async def tweets_by_category(self, transcript_id: str) -> dict[str, list[Tweet]]:
        return group_by_category(await self.list_tweets(transcript_id))


async def read_sample_transcript(path: str | Path) -> str:
    """Contents of the bundled sample transcript.

    Raises:
        NotFoundError: The sample file does not exist.
        StoreUnavailable: The file exists but cannot be read.
    """
    sample = Path(path)
    if not sample.is_file():
        raise NotFoundError(f"Sample transcript not found: {sample.name}")
    try:
        return await asyncio.to_thread(sample.read_text, encoding="utf-8")
    except OSError as exc:
        logger.error("transcript.sample_read_failed", path=str(sample), error=str(exc))
        raise StoreUnavailable("Failed to read sample transcript") from exc

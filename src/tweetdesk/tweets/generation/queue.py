"""GenerationQueue -- background tweet generation per transcript.

Transcript creation returns before generation runs. ``submit`` schedules
one task on the running event loop; the task calls the adapter, parses the
response, persists each tweet as a draft through the lifecycle manager and
finally records the outcome on the transcript: generation_status,
generation_error on failure, and tweet_count as the number of drafts
actually stored (non-zero on failure if a write broke off partway).
Failures are logged and recorded, never raised to the submitter.

Running tasks are held in a set until they finish so the loop does not
garbage collect them; ``drain`` awaits whatever is still in flight.
"""

from __future__ import annotations

import asyncio

import structlog

from src.tweetdesk.core.monitoring import record_generation_outcome
from src.tweetdesk.tweets.errors import GenerationError, TweetDeskError
from src.tweetdesk.tweets.generation.adapter import GenerationAdapter
from src.tweetdesk.tweets.generation.parser import ResponseParser
from src.tweetdesk.tweets.lifecycle import TweetLifecycleManager
from src.tweetdesk.tweets.repository import RecordKind, RecordStore
from src.tweetdesk.tweets.schemas import GenerationStatus, Transcript

logger = structlog.get_logger(__name__)


class GenerationQueue:
    """Fire-and-forget generation with the outcome written back to storage.

    Args:
        store: RecordStore holding the transcripts collection.
        adapter: GenerationAdapter producing raw model output.
        parser: ResponseParser recovering tweets from that output.
        lifecycle: TweetLifecycleManager used to persist new drafts.
    """

    def __init__(
        self,
        store: RecordStore,
        adapter: GenerationAdapter,
        parser: ResponseParser,
        lifecycle: TweetLifecycleManager,
    ) -> None:
        self._store = store
        self._adapter = adapter
        self._parser = parser
        self._lifecycle = lifecycle
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def submit(self, transcript: Transcript) -> asyncio.Task:
        """Schedule generation for a freshly stored transcript."""
        task = asyncio.create_task(
            self._run(transcript), name=f"generate-tweets-{transcript.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("generation.submitted", transcript_id=transcript.id)
        return task

    async def drain(self) -> None:
        """Wait for every in-flight generation to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, transcript: Transcript) -> None:
        log = logger.bind(transcript_id=transcript.id)
        persisted = 0

        try:
            raw_text = await self._adapter.generate(transcript.content)
            generated = self._parser.parse(raw_text)

            for item in generated:
                await self._lifecycle.create(transcript.id, item.category, item.content)
                persisted += 1
        except GenerationError as exc:
            log.warning("generation.failed", reason=exc.reason, error=exc.message)
            await self._record_outcome(transcript, GenerationStatus.FAILED, error=exc.message)
            return
        except TweetDeskError as exc:
            log.error(
                "generation.persist_failed",
                reason=exc.reason,
                error=exc.message,
                persisted=persisted,
            )
            await self._record_outcome(
                transcript, GenerationStatus.FAILED, error=exc.message, tweet_count=persisted
            )
            return
        except Exception as exc:
            log.exception("generation.unexpected_error", persisted=persisted)
            await self._record_outcome(
                transcript, GenerationStatus.FAILED, error=str(exc), tweet_count=persisted
            )
            return

        log.info("generation.succeeded", tweet_count=len(generated))
        await self._record_outcome(
            transcript, GenerationStatus.SUCCEEDED, tweet_count=len(generated)
        )

    async def _record_outcome(
        self,
        transcript: Transcript,
        status: GenerationStatus,
        error: str | None = None,
        tweet_count: int = 0,
    ) -> None:
        record_generation_outcome(status.value)

        updated = transcript.model_copy(
            update={
                "generation_status": status,
                "generation_error": error,
                "tweet_count": tweet_count,
            }
        )
        try:
            replaced = await self._store.replace(
                RecordKind.TRANSCRIPTS, transcript.id, updated
            )
        except TweetDeskError as exc:
            logger.error(
                "generation.outcome_not_recorded",
                transcript_id=transcript.id,
                status=status.value,
                error=exc.message,
            )
            return

        if not replaced:
            logger.warning(
                "generation.transcript_missing",
                transcript_id=transcript.id,
                status=status.value,
            )

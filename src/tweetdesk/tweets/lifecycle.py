"""TweetLifecycleManager -- the draft -> edited -> sent state machine.

Every operation reads the tweet, validates the transition against
VALID_TRANSITIONS, and rewrites the record through the RecordStore. ``sent``
is terminal: edit, send and delete on a sent tweet all fail with
AlreadySent, every time.

Real sends go through a PublishGateway first; the record is only touched
after the remote post succeeds.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from src.tweetdesk.core.monitoring import record_tweet_transition
from src.tweetdesk.tweets.errors import (
    AlreadySent,
    InvalidContent,
    InvalidCredentials,
    TweetNotFound,
)
from src.tweetdesk.tweets.repository import RecordKind, RecordStore
from src.tweetdesk.tweets.schemas import (
    PlatformCredentials,
    SendMode,
    Tweet,
    TweetState,
    utcnow,
)

logger = structlog.get_logger(__name__)


# ── State Transition Rules ────────────────────────────────────────────────────

# Maps each state to the set of states it can transition TO.
# APPROVED is reserved; nothing moves a tweet into it.
VALID_TRANSITIONS: dict[TweetState, set[TweetState]] = {
    TweetState.DRAFT: {TweetState.EDITED, TweetState.SENT},
    TweetState.EDITED: {TweetState.EDITED, TweetState.SENT},
    TweetState.APPROVED: {TweetState.EDITED, TweetState.SENT},
    TweetState.SENT: set(),  # Terminal state
}


def can_transition(from_state: TweetState, to_state: TweetState) -> bool:
    return to_state in VALID_TRANSITIONS.get(from_state, set())


def _ensure_transition(tweet: Tweet, to_state: TweetState | None, action: str) -> None:
    """Reject any action on a terminal tweet; to_state None means removal."""
    allowed = VALID_TRANSITIONS.get(tweet.state, set())
    if not allowed or (to_state is not None and to_state not in allowed):
        logger.info("tweet.rejected_already_sent", tweet_id=tweet.id, action=action)
        raise AlreadySent(tweet.id, action)


class PublishGateway(Protocol):
    async def publish(self, content: str, credentials: PlatformCredentials) -> str: ...

    async def validate_credentials(self, credentials: PlatformCredentials) -> bool: ...


# ── Lifecycle Manager ─────────────────────────────────────────────────────────


class TweetLifecycleManager:
    """Creates tweets and applies edit/send/delete to them.

    Args:
        store: RecordStore holding the tweets collection.
        gateway: PublishGateway used for real sends.
    """

    def __init__(self, store: RecordStore, gateway: PublishGateway) -> None:
        self._store = store
        self._gateway = gateway

    # ── Reads ────────────────────────────────────────────────────────────

    async def get(self, tweet_id: str) -> Tweet:
        tweet = await self._store.get_by_id(RecordKind.TWEETS, tweet_id)
        if tweet is None:
            raise TweetNotFound(tweet_id)
        return tweet

    async def list_for_transcript(self, transcript_id: str) -> list[Tweet]:
        """Tweets of one transcript in generation order."""
        tweets = await self._store.list_all(RecordKind.TWEETS)
        return [t for t in tweets if t.transcript_id == transcript_id]

    # ── Mutations ────────────────────────────────────────────────────────

    async def create(self, transcript_id: str, category: str, content: str) -> Tweet:
        """Persist a new tweet. New tweets always start in draft."""
        tweet = Tweet(
            transcript_id=transcript_id,
            category=category,
            content=content,
            state=TweetState.DRAFT,
        )
        await self._store.append(RecordKind.TWEETS, tweet)
        record_tweet_transition("create", tweet.state.value)
        return tweet

    async def edit(self, tweet_id: str, new_content: str) -> Tweet:
        """Replace a tweet's content and move it to edited.

        Raises:
            TweetNotFound: No tweet with this id.
            AlreadySent: The tweet has already been sent.
            InvalidContent: new_content is empty or whitespace.
        """
        tweet = await self.get(tweet_id)
        _ensure_transition(tweet, TweetState.EDITED, "edit")

        if not new_content or not new_content.strip():
            raise InvalidContent("Tweet content must not be empty")

        updated = tweet.model_copy(
            update={
                "content": new_content,
                "state": TweetState.EDITED,
                "updated_at": utcnow(),
            }
        )
        await self._replace(updated)

        record_tweet_transition("edit", updated.state.value)
        logger.info("tweet.edited", tweet_id=tweet_id, from_state=tweet.state.value)
        return updated

    async def send(
        self,
        tweet_id: str,
        mode: SendMode = SendMode.SIMULATED,
        credentials: PlatformCredentials | None = None,
    ) -> Tweet:
        """Mark a tweet sent, posting it to X first when mode is real.

        A failed real publish leaves the stored record exactly as it was.

        Raises:
            TweetNotFound: No tweet with this id.
            AlreadySent: The tweet has already been sent.
            InvalidCredentials: Real mode without a complete credential set.
            PublishFailed: The X platform rejected or errored on the post.
            GatewayUnavailable: The X platform could not be reached.
        """
        tweet = await self.get(tweet_id)
        _ensure_transition(tweet, TweetState.SENT, "send")

        update: dict = {"state": TweetState.SENT}

        if mode == SendMode.REAL:
            if credentials is None or not credentials.is_complete():
                raise InvalidCredentials()
            x_post_id = await self._gateway.publish(tweet.content, credentials)
            update["x_post_id"] = x_post_id
            logger.info("tweet.published", tweet_id=tweet_id, x_post_id=x_post_id)
        else:
            logger.info("tweet.send_simulated", tweet_id=tweet_id)

        update["updated_at"] = utcnow()
        updated = tweet.model_copy(update=update)

        try:
            await self._replace(updated)
        except TweetNotFound:
            if mode == SendMode.REAL:
                # Remote post exists but the local record is gone; not reconciled.
                logger.error(
                    "tweet.publish_not_persisted",
                    tweet_id=tweet_id,
                    x_post_id=updated.x_post_id,
                )
            raise

        record_tweet_transition(f"send_{mode.value}", updated.state.value)
        logger.info("tweet.sent", tweet_id=tweet_id, mode=mode.value)
        return updated

    async def delete(self, tweet_id: str) -> bool:
        """Remove a tweet. Returns False if it does not exist.

        Raises:
            AlreadySent: The tweet has already been sent.
        """
        tweet = await self._store.get_by_id(RecordKind.TWEETS, tweet_id)
        if tweet is None:
            return False

        _ensure_transition(tweet, None, "delete")

        removed = await self._store.remove_by_id(RecordKind.TWEETS, tweet_id)
        if removed:
            record_tweet_transition("delete", tweet.state.value)
            logger.info("tweet.deleted", tweet_id=tweet_id)
        return removed

    async def _replace(self, tweet: Tweet) -> None:
        if not await self._store.replace(RecordKind.TWEETS, tweet.id, tweet):
            raise TweetNotFound(tweet.id)


def group_by_category(tweets: list[Tweet]) -> dict[str, list[Tweet]]:
    """Group tweets by category, categories in first-seen order."""
    grouped: dict[str, list[Tweet]] = {}
    for tweet in tweets:
        grouped.setdefault(tweet.category, []).append(tweet)
    return grouped

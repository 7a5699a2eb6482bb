"""Pydantic v2 schemas for the transcript and tweet domain.

Defines the data contracts shared by the record store, the generation
pipeline, the lifecycle manager and the HTTP layer. Field names serialize
in camelCase (``transcriptId``, ``createdAt``, ``xPostId``) so stored JSON
and API payloads keep the same shape; Python code uses snake_case.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> dict:
        """JSON-safe dict in stored form (camelCase, unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Enums ────────────────────────────────────────────────────────────────────


class TweetState(str, Enum):
    """Lifecycle state of a generated tweet.

    ``APPROVED`` is reserved: no operation produces it or moves a tweet into
    it. It stays in the enum so records carrying it still load.
    """

    DRAFT = "draft"
    EDITED = "edited"
    APPROVED = "approved"
    SENT = "sent"


class GenerationStatus(str, Enum):
    """Outcome of the background tweet generation for a transcript."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SendMode(str, Enum):
    """How a tweet is sent: state change only, or a real X post."""

    SIMULATED = "simulated"
    REAL = "real"


# ── Entities ─────────────────────────────────────────────────────────────────


class Transcript(CamelModel):
    """A persisted meeting transcript.

    title/date/content/id/created_at never change after creation. The
    generation_* fields and tweet_count are written only by the
    generation queue.
    """

    id: str = Field(default_factory=_new_id)
    title: str
    date: str
    content: str
    created_at: datetime = Field(default_factory=utcnow)
    generation_status: GenerationStatus = GenerationStatus.PENDING
    generation_error: str | None = None
    tweet_count: int = 0


class Tweet(CamelModel):
    """A short-form post derived from a transcript."""

    id: str = Field(default_factory=_new_id)
    transcript_id: str
    category: str = ""
    content: str = ""
    state: TweetState = TweetState.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None
    x_post_id: str | None = None


class GeneratedTweet(BaseModel):
    """One {category, content} pair extracted from model output."""

    category: str = ""
    content: str = ""


# ── Request Models ───────────────────────────────────────────────────────────


class TranscriptCreate(CamelModel):
    """Request schema for submitting a transcript."""

    title: str
    date: str
    content: str

    @field_validator("title", "date", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value


class TweetEdit(CamelModel):
    """Request schema for editing a tweet's content.

    Emptiness is checked by the lifecycle manager so the failure carries the
    invalid_content reason code rather than a schema error.
    """

    content: str = ""


class PlatformCredentials(CamelModel):
    """X API credentials supplied by the caller for a single call.

    Never persisted server-side.
    """

    api_key: str = Field(default="", repr=False)
    api_secret: str = Field(default="", repr=False)
    access_token: str = Field(default="", repr=False)
    access_secret: str = Field(default="", repr=False)

    def is_complete(self) -> bool:
        return all(
            value.strip()
            for value in (
                self.api_key,
                self.api_secret,
                self.access_token,
                self.access_secret,
            )
        )

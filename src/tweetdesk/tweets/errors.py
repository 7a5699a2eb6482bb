"""Error taxonomy for the transcript/tweet domain.

Every error carries a stable ``reason`` code and the HTTP status the API
layer translates it to. Generation errors never reach a caller: the
generation queue records them on the transcript instead.
"""

from __future__ import annotations


class TweetDeskError(Exception):
    """Base class for all domain errors."""

    reason = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ── Lookup & Validation ──────────────────────────────────────────────────────


class NotFoundError(TweetDeskError):
    reason = "not_found"
    status_code = 404


class TweetNotFound(NotFoundError):
    def __init__(self, tweet_id: str) -> None:
        self.tweet_id = tweet_id
        super().__init__(f"Tweet not found: {tweet_id}")


class TranscriptNotFound(NotFoundError):
    def __init__(self, transcript_id: str) -> None:
        self.transcript_id = transcript_id
        super().__init__(f"Transcript not found: {transcript_id}")


class InvalidContent(TweetDeskError):
    reason = "invalid_content"
    status_code = 400


class TranscriptTooLarge(TweetDeskError):
    reason = "transcript_too_large"
    status_code = 413

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"Transcript content is {size} characters; the limit is {limit}"
        )


class InvalidCredentials(TweetDeskError):
    reason = "invalid_credentials"
    status_code = 400

    def __init__(self, message: str = "Missing X API credentials") -> None:
        super().__init__(message)


class AlreadySent(TweetDeskError):
    """Raised for any edit, send or delete on a tweet already in state sent."""

    reason = "already_sent"
    status_code = 400

    def __init__(self, tweet_id: str, action: str) -> None:
        self.tweet_id = tweet_id
        self.action = action
        super().__init__(f"Cannot {action} tweet {tweet_id}: it has already been sent")


# ── Generation Pipeline ──────────────────────────────────────────────────────


class GenerationError(TweetDeskError):
    """Terminal failure of one generation attempt for a transcript."""

    reason = "generation_error"
    status_code = 502


class GenerationFailed(GenerationError):
    reason = "generation_failed"


class UnparseableGenerationResponse(GenerationError):
    reason = "unparseable_generation_response"

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


# ── External Platform ────────────────────────────────────────────────────────


class PublishFailed(TweetDeskError):
    """The X platform rejected or errored on a post. Carries the cause."""

    reason = "publish_failed"
    status_code = 502

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


# ── Infrastructure ───────────────────────────────────────────────────────────


class StoreUnavailable(TweetDeskError):
    reason = "store_unavailable"
    status_code = 503


class GatewayUnavailable(TweetDeskError):
    reason = "gateway_unavailable"
    status_code = 503

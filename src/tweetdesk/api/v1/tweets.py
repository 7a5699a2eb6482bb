"""REST endpoints for the tweet lifecycle: edit, send, delete.

Sending is either simulated (state change only) or real, where the tweet is
posted to X with credentials supplied in the request body. Credentials are
used for that one call and never stored.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from src.tweetdesk.api.deps import (
    get_lifecycle_manager,
    get_publish_gateway,
    require_operator,
    to_http_exception,
)
from src.tweetdesk.tweets.errors import InvalidCredentials, TweetDeskError
from src.tweetdesk.tweets.schemas import PlatformCredentials, SendMode, TweetEdit

router = APIRouter(prefix="/api/tweets", tags=["tweets"])

_gated = [Depends(require_operator)]


async def validate_platform_credentials(
    credentials: PlatformCredentials, gateway: Any
) -> dict:
    """Shared body of both credential validation routes."""
    try:
        if not credentials.is_complete():
            raise InvalidCredentials()
        is_valid = await gateway.validate_credentials(credentials)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "isValid": is_valid}


@router.post("/validate-x-creds")
async def validate_x_creds(
    body: PlatformCredentials,
    gateway: Any = Depends(get_publish_gateway),
) -> dict:
    return await validate_platform_credentials(body, gateway)


@router.post("/send-to-x/{tweet_id}", dependencies=_gated)
async def send_to_x(
    tweet_id: str,
    body: PlatformCredentials,
    lifecycle: Any = Depends(get_lifecycle_manager),
) -> dict:
    """Post the tweet to X, then mark it sent with its remote post id."""
    try:
        if not body.is_complete():
            raise InvalidCredentials()
        tweet = await lifecycle.send(tweet_id, SendMode.REAL, credentials=body)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "tweet": tweet.to_record()}


@router.put("/{tweet_id}/edit", dependencies=_gated)
async def edit_tweet(
    tweet_id: str,
    body: TweetEdit,
    lifecycle: Any = Depends(get_lifecycle_manager),
) -> dict:
    try:
        tweet = await lifecycle.edit(tweet_id, body.content)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "tweet": tweet.to_record()}


@router.post("/{tweet_id}/send", dependencies=_gated)
async def send_tweet(
    tweet_id: str,
    lifecycle: Any = Depends(get_lifecycle_manager),
) -> dict:
    """Simulated send: the tweet is marked sent without contacting X."""
    try:
        tweet = await lifecycle.send(tweet_id, SendMode.SIMULATED)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "tweet": tweet.to_record()}


@router.delete("/{tweet_id}", dependencies=_gated)
async def delete_tweet(
    tweet_id: str,
    lifecycle: Any = Depends(get_lifecycle_manager),
) -> dict:
    try:
        deleted = await lifecycle.delete(tweet_id)
    except TweetDeskError as exc:
        raise to_http_exception(exc) from exc

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "success": False,
                "reason": "not_found",
                "message": f"Tweet not found: {tweet_id}",
            },
        )
    return {"success": True, "message": "Tweet successfully deleted"}

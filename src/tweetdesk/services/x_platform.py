"""X (Twitter) publish gateway via tweepy.

Posts tweet text and checks credentials with OAuth 1.0a user context.
Credentials arrive with each call and are never cached; a fresh
tweepy.Client is built per call. tweepy is synchronous, so calls run in
worker threads.
"""

from __future__ import annotations

import asyncio

import structlog
import tweepy

from src.tweetdesk.tweets.errors import GatewayUnavailable, PublishFailed
from src.tweetdesk.tweets.schemas import PlatformCredentials

logger = structlog.get_logger(__name__)


def _build_client(credentials: PlatformCredentials) -> tweepy.Client:
    return tweepy.Client(
        consumer_key=credentials.api_key,
        consumer_secret=credentials.api_secret,
        access_token=credentials.access_token,
        access_token_secret=credentials.access_secret,
    )


class XPublishGateway:
    """PublishGateway backed by the X API v2.

    Args:
        client_factory: Builds a tweepy.Client from credentials. Swapped out
            in tests.
    """

    def __init__(self, client_factory=_build_client) -> None:
        self._client_factory = client_factory

    async def validate_credentials(self, credentials: PlatformCredentials) -> bool:
        """Check credentials with the cheapest authenticated call (users/me).

        Returns False when X rejects the credentials; raises
        GatewayUnavailable when X cannot give an answer (network fault,
        rate limit, server error).
        """
        if not credentials.is_complete():
            return False

        client = self._client_factory(credentials)
        try:
            response = await asyncio.to_thread(client.get_me, user_auth=True)
        except (tweepy.errors.TooManyRequests, tweepy.errors.TwitterServerError) as exc:
            logger.warning("x.validate_unavailable", error=str(exc))
            raise GatewayUnavailable(f"X API unavailable: {exc}") from exc
        except tweepy.errors.HTTPException as exc:
            # 401/403 and other client-side rejections
            logger.info(
                "x.credentials_rejected",
                status_code=getattr(exc.response, "status_code", None),
            )
            return False
        except OSError as exc:
            logger.warning("x.validate_unreachable", error=str(exc))
            raise GatewayUnavailable(f"X API unreachable: {exc}") from exc

        user = getattr(response, "data", None)
        logger.info("x.credentials_valid", username=getattr(user, "username", None))
        return True

    async def publish(self, content: str, credentials: PlatformCredentials) -> str:
        """Post ``content`` and return the remote post id.

        Raises:
            PublishFailed: On any error, carrying the cause.
        """
        client = self._client_factory(credentials)
        try:
            response = await asyncio.to_thread(
                client.create_tweet, text=content, user_auth=True
            )
        except (tweepy.errors.TweepyException, OSError) as exc:
            logger.warning("x.publish_failed", error=str(exc))
            raise PublishFailed(f"Failed to post to X: {exc}", cause=exc) from exc

        data = getattr(response, "data", None) or {}
        post_id = data.get("id")
        if not post_id:
            raise PublishFailed("X API response did not include a post id")

        logger.info("x.published", x_post_id=str(post_id))
        return str(post_id)

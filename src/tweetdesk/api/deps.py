"""FastAPI dependency injection for services and the operator gate.

Services are built once in the application lifespan and stored on
app.state; these helpers hand them to endpoints and fail with 503 if
startup did not complete. Domain errors are translated to HTTPException
with a structured ``{success, reason, message}`` detail.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request, status

from src.tweetdesk.config import Settings, get_settings
from src.tweetdesk.core.security import verify_token
from src.tweetdesk.tweets.errors import TweetDeskError


def to_http_exception(exc: TweetDeskError) -> HTTPException:
    """Translate a domain error into its HTTP response."""
    return HTTPException(
        status_code=exc.status_code,
        detail={"success": False, "reason": exc.reason, "message": exc.message},
    )


def _get_state(request: Request, name: str, label: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "success": False,
                "reason": "service_unavailable",
                "message": f"{label} not initialized",
            },
        )
    return value


def get_app_settings(request: Request) -> Settings:
    """Settings stored at startup, falling back to the process singleton."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_transcript_service(request: Request) -> Any:
    """Retrieve TranscriptService from app.state, 503 if not available."""
    return _get_state(request, "transcript_service", "Transcript service")


def get_lifecycle_manager(request: Request) -> Any:
    """Retrieve TweetLifecycleManager from app.state, 503 if not available."""
    return _get_state(request, "lifecycle_manager", "Tweet lifecycle manager")


def get_publish_gateway(request: Request) -> Any:
    """Retrieve the X publish gateway from app.state, 503 if not available."""
    return _get_state(request, "publish_gateway", "X publish gateway")


async def require_operator(request: Request) -> str | None:
    """Enforce the operator login gate when AUTH_ENABLED is set.

    Returns the operator email from the token, or None when the gate is off.

    Raises:
        HTTPException(401): Gate is on and no valid bearer token was sent.
    """
    if not get_app_settings(request).AUTH_ENABLED:
        return None

    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "reason": "unauthorized",
                "message": "Authentication required",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(auth_header[7:], token_type="access")
    return payload["sub"]

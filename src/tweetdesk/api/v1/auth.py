"""Authentication API endpoints.

Provides operator login (JWT issuance) and X credential validation. Neither
endpoint requires a token.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from src.tweetdesk.api.deps import get_publish_gateway
from src.tweetdesk.api.v1.tweets import validate_platform_credentials
from src.tweetdesk.core.security import authenticate_operator, create_access_token
from src.tweetdesk.tweets.schemas import PlatformCredentials

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/login")
async def login(body: LoginRequest) -> dict:
    """Authenticate the operator and return an access token."""
    if not authenticate_operator(body.email, body.password):
        logger.info("auth.login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "reason": "unauthorized",
                "message": "Invalid email or password",
            },
        )

    token = create_access_token({"sub": body.email.strip().lower()})
    logger.info("auth.login_succeeded")
    return {"success": True, "token": token}


@router.post("/validate-x-credentials")
async def validate_x_credentials(
    body: PlatformCredentials,
    gateway: Any = Depends(get_publish_gateway),
) -> dict:
    """Check X API credentials without requiring a login."""
    return await validate_platform_credentials(body, gateway)

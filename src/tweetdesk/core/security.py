"""JWT issuance and verification for the operator login gate.

A single operator account is configured through ADMIN_EMAIL and
ADMIN_PASSWORD. Tokens are HS256 JWTs signed with JWT_SECRET_KEY.
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone

import structlog
from fastapi import HTTPException, status
from jose import JWTError, jwt

from src.tweetdesk.config import get_settings

logger = structlog.get_logger(__name__)


# ── Operator Authentication ───────────────────────────────────────────────────


def authenticate_operator(email: str, password: str) -> bool:
    """Check login credentials against the configured operator account."""
    settings = get_settings()
    email_ok = hmac.compare_digest(
        email.strip().lower().encode("utf-8"),
        settings.ADMIN_EMAIL.lower().encode("utf-8"),
    )
    password_ok = hmac.compare_digest(
        password.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8")
    )
    return email_ok and password_ok


# ── JWT Token Creation ────────────────────────────────────────────────────────


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token.

    The data dict should contain at minimum:
    - sub: operator email (str)
    """
    settings = get_settings()
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# ── JWT Token Verification ────────────────────────────────────────────────────


def verify_token(token: str, token_type: str = "access") -> dict:
    """Decode and validate a JWT token.

    Args:
        token: The JWT string.
        token_type: Expected token type.

    Returns:
        The decoded payload dict.

    Raises:
        HTTPException(401): If the token is invalid, expired, or wrong type.
    """
    settings = get_settings()
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "success": False,
            "reason": "unauthorized",
            "message": "Could not validate credentials",
        },
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        logger.info("auth.token_rejected")
        raise credentials_exception
    if payload.get("type") != token_type or not payload.get("sub"):
        raise credentials_exception
    return payload


def operator_from_token(token: str) -> str | None:
    """Operator email from a valid access token, or None if it does not verify."""
    try:
        return verify_token(token, token_type="access")["sub"]
    except HTTPException:
        return None

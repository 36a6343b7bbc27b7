"""JWT access tokens.

Token issuance lives with the external auth service; this module only needs
to agree with it on the claims so the API can resolve the current user.
"""
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

from src.config.settings import settings


class TokenData(BaseModel):
    """Decoded access token payload."""

    user_id: uuid.UUID
    role: str | None = None
    exp: datetime | None = None


def create_access_token(
    user_id: uuid.UUID,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for a user."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": str(user_id), "exp": expire, "type": "access"}
    if role:
        payload["role"] = role
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> TokenData | None:
    """Decode and verify an access token.

    Returns:
        TokenData if the token is valid and not expired, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.PyJWTError:
        return None

    if payload.get("type") != "access" or "sub" not in payload:
        return None

    try:
        user_id = uuid.UUID(payload["sub"])
    except (ValueError, TypeError):
        return None

    exp = payload.get("exp")
    return TokenData(
        user_id=user_id,
        role=payload.get("role"),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )

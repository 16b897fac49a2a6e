"""Security utilities for session tokens.

Sessions are carried as signed JWTs. The token names the role (``kind``), the
subject id, the workspace and, for the super admin bypass, who entered the
workspace. Profiles and voters are re-read from storage on every request, so
a token never grants more than the stored records allow.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from core.config import settings

# Token issuer and audience for validation
TOKEN_ISSUER = "multivote-api"
TOKEN_AUDIENCE = "multivote-client"


def _create_token_base(
    data: dict[str, Any],
    token_type: str,
    expires_delta: timedelta,
) -> str:
    """Create a JWT token with standard claims."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + expires_delta
    to_encode.update(
        {
            "exp": expire,
            "iat": now,
            "type": token_type,
            "iss": TOKEN_ISSUER,
            "aud": TOKEN_AUDIENCE,
            "jti": secrets.token_urlsafe(16),  # Unique token ID for revocation
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_session_token(
    kind: str,
    subject: str,
    workspace_id: Optional[str] = None,
    entered_by: Optional[str] = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a session token for a super admin, admin or voter."""
    delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: dict[str, Any] = {"sub": subject, "kind": kind}
    if workspace_id:
        claims["ws"] = workspace_id
    if entered_by:
        claims["entered_by"] = entered_by
    return _create_token_base(claims, "session", delta)


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any] | None:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode
        expected_type: If provided, validates the token type matches

    Returns:
        The decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=TOKEN_ISSUER,
            audience=TOKEN_AUDIENCE,
        )
        if expected_type and payload.get("type") != expected_type:
            return None
        return payload
    except JWTError:
        return None


def seconds_until_expiry(payload: dict[str, Any]) -> int:
    """Remaining lifetime of a decoded token, never negative."""
    exp = payload.get("exp")
    if exp is None:
        return 0
    remaining = int(exp - datetime.now(timezone.utc).timestamp())
    return max(remaining, 0)

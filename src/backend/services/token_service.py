"""
Session token revocation.

Keeps revoked JWT ids in memory until the token would have expired anyway.
Used by logout and by the vote endpoint, which ends the voter's session once
the ballot is committed.
"""

from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class TokenService:
    """
    In-memory JWT blacklist.

    Singleton so every request handler shares the same revocation set.
    """

    _instance: Optional["TokenService"] = None
    _revoked: dict[str, datetime] = {}  # key -> expires_at

    PREFIX_TOKEN_BLACKLIST = "token:blacklist:"

    def __new__(cls) -> "TokenService":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._revoked = {}
            cls._instance._lock = Lock()
        return cls._instance

    # =========================================================================
    # Token Blacklist
    # =========================================================================

    async def blacklist_token(self, token_jti: str, expires_in_seconds: int) -> bool:
        """
        Revoke a token until its natural expiry.

        Args:
            token_jti: The JWT ID (jti claim)
            expires_in_seconds: Remaining lifetime of the token

        Returns:
            True once the token is blacklisted
        """
        key = f"{self.PREFIX_TOKEN_BLACKLIST}{token_jti}"
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=max(expires_in_seconds, 0))
        with self._lock:
            self._purge_expired()
            self._revoked[key] = expires_at
        logger.info("token_blacklisted", jti=token_jti[:8])
        return True

    async def is_token_blacklisted(self, token_jti: str) -> bool:
        key = f"{self.PREFIX_TOKEN_BLACKLIST}{token_jti}"
        with self._lock:
            expires_at = self._revoked.get(key)
            if expires_at is None:
                return False
            if datetime.now(timezone.utc) < expires_at:
                return True
            del self._revoked[key]
        return False

    def clear(self) -> None:
        with self._lock:
            self._revoked.clear()

    def _purge_expired(self) -> None:
        now = datetime.now(timezone.utc)
        for key in [k for k, expires_at in self._revoked.items() if expires_at <= now]:
            del self._revoked[key]


def get_token_service() -> TokenService:
    return TokenService()

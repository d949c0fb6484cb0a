"""Signed session tokens (HS256 JWT).

Tokens are stateless: there is no revocation list, and a token stays valid
until ``exp`` regardless of later account changes.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import JWTError, jwt

from domain.model.errors import InvalidTokenError
from utils.config import Settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_DAYS = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    def __init__(
        self,
        secret: str,
        algorithm: str = JWT_ALGORITHM,
        lifetime: timedelta = timedelta(days=JWT_EXPIRATION_DAYS),
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.lifetime = lifetime
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(days=settings.jwt_expiration_days),
        )

    def issue(self, user_id: str) -> str:
        """Create a signed token for ``user_id`` expiring after ``lifetime``."""
        now = self._clock()
        payload = {
            "sub": user_id,
            "user_id": user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify signature and expiry and return the embedded user id.

        Raises:
            InvalidTokenError: for any malformed, tampered or expired token
        """
        if not token:
            raise InvalidTokenError("Invalid token")
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug("JWT verification failed", extra={"reason": str(e)})
            raise InvalidTokenError("Invalid token") from None

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidTokenError("Invalid token")
        if self._clock().timestamp() >= exp:
            logger.debug("JWT verification failed", extra={"reason": "expired"})
            raise InvalidTokenError("Invalid token")

        # Tokens issued before "sub" was added only carry "user_id".
        user_id = payload.get("sub") or payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError("Invalid token")
        return user_id

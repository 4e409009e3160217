"""
JWT token issuance and verification.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from jose.exceptions import JOSEError
from pydantic import BaseModel

from account_service.kernel.identity.exceptions import SigningError

TOKEN_EXPIRE_DAYS = 7


class TokenPayload(BaseModel):
    """Decoded bearer token."""

    user_id: uuid.UUID
    iat: datetime
    exp: datetime


class TokenIssuer:
    """
    Signs bearer tokens that bind exactly one identity.

    The payload is ``{"user": {"id": <id>}, "iat": ..., "exp": ...}`` with
    ``exp`` a fixed number of days after ``iat``, both in epoch seconds.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = TOKEN_EXPIRE_DAYS,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_delta = timedelta(days=expire_days)

    def ensure_ready(self) -> None:
        """Raise SigningError if no signing key is configured."""
        if not self.secret_key:
            raise SigningError("Token signing key is not configured")

    def issue(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for one identity.

        Args:
            user_id: Identity the token attests to
            now: Issuance time (defaults to the current UTC time)

        Returns:
            Encoded JWT

        Raises:
            SigningError: If no signing key is configured or signing fails
        """
        self.ensure_ready()

        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        payload = {
            "user": {"id": str(user_id)},
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expire_delta).timestamp()),
        }

        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except JOSEError as e:
            raise SigningError() from e

    def decode(self, token: str) -> Optional[TokenPayload]:
        """
        Verify signature and expiry of a token and decode it.

        Args:
            token: Encoded JWT

        Returns:
            TokenPayload if valid, None otherwise
        """
        if not self.secret_key:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
            return TokenPayload(
                user_id=uuid.UUID(payload["user"]["id"]),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (JWTError, KeyError, TypeError, ValueError):
            return None

"""JWT issuing and bearer-token authentication."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi.security.utils import get_authorization_scheme_param
from jose import JWTError, jwt

from api.config import Settings
from domain.model.errors import UnauthorizedError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

REQUIRED_CLAIMS = ("sub", "iat", "exp")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Identity:
    """Decoded claim set of a verified token."""
    subject: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """Signs and verifies access tokens with the process-wide secret.

    Expiry is checked against ``clock``, the server's own time source.
    """

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self._ttl = settings.token_ttl
        self._clock = clock

    def create_access_token(self, user_id: str) -> tuple[str, datetime]:
        """Create a signed token for ``user_id``. Returns (token, expires_at)."""
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._ttl
        payload = {
            "sub": user_id,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, expires_at

    def verify_token(self, token: str) -> Identity:
        """Verify signature, required claims and expiry.

        Raises:
            UnauthorizedError: token is malformed, badly signed or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # exp is compared below against the server clock
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug("JWT verification failed", extra={"error": str(e)})
            raise UnauthorizedError("Invalid authentication credentials")

        missing = [c for c in REQUIRED_CLAIMS if c not in payload]
        if missing:
            logger.debug("JWT missing claims", extra={"missing": missing})
            raise UnauthorizedError("Invalid authentication credentials")

        subject = payload["sub"]
        exp, iat = payload["exp"], payload["iat"]
        if not isinstance(subject, str) or not subject:
            raise UnauthorizedError("Invalid authentication credentials")
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            raise UnauthorizedError("Invalid authentication credentials")

        if self._clock().timestamp() >= exp:
            raise UnauthorizedError("Token expired")

        return Identity(
            subject=subject,
            issued_at=datetime.fromtimestamp(iat, timezone.utc),
            expires_at=datetime.fromtimestamp(exp, timezone.utc),
        )


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the credentials of an ``Authorization: Bearer`` header."""
    scheme, credentials = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not credentials:
        raise UnauthorizedError("Not authenticated")
    return credentials


def authenticate(authorization: Optional[str], tokens: TokenService) -> Identity:
    """Authenticate a request from its Authorization header value.

    The subject is not looked up here; handlers decide what an unknown
    subject means.
    """
    return tokens.verify_token(extract_bearer_token(authorization))

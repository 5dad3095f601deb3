from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

ALGORITHM = "HS256"
DEFAULT_EXPIRE_MINUTES = 60


class InvalidToken(Exception):
    pass


class InvalidSignature(InvalidToken):
    pass


class TokenExpired(InvalidToken):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class Identity:
    email: str


class TokenCodec:
    """Issues and verifies session tokens that carry only an email claim."""

    def __init__(self, secret: str, expire_minutes: int = DEFAULT_EXPIRE_MINUTES):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.expires_in = timedelta(minutes=expire_minutes)

    def issue(self, email: str, issued_at: Optional[datetime] = None) -> str:
        now = issued_at or datetime.now(timezone.utc)
        to_encode = {
            "email": normalize_email(email),
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(to_encode, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidSignature("Invalid token") from exc

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise InvalidSignature("Invalid token")
        return email

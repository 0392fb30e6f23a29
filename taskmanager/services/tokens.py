from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import JWTError, jwt

from ..config import JWT_EXPIRATION_MINUTES, REFRESH_TOKEN_EXPIRATION_MINUTES, SECRET_KEY
from ..errors import InvalidTokenError
from ..models import User

ALGORITHM = "HS256"


def _build_token(user: User, expires_delta: timedelta, issued_at: Optional[datetime] = None) -> str:
    issued_at = issued_at or datetime.now(timezone.utc)
    claims = {
        "sub": user.username,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
        # Keeps tokens minted within the same second distinct
        "jti": uuid4().hex,
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def generate_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived signed access token for ``user``."""
    return _build_token(user, expires_delta or timedelta(minutes=JWT_EXPIRATION_MINUTES))


def generate_refresh_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Create a long-lived signed refresh token for ``user``."""
    return _build_token(
        user, expires_delta or timedelta(minutes=REFRESH_TOKEN_EXPIRATION_MINUTES)
    )


def _decode(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError("Could not validate token") from exc


def extract_username(token: str) -> str:
    """Verify ``token`` and return its subject.

    Raises InvalidTokenError when the signature is wrong, the token is
    malformed or expired, or it carries no subject.
    """
    username = _decode(token).get("sub")
    if not username:
        raise InvalidTokenError("Token has no subject")
    return username


def extract_expiration(token: str) -> datetime:
    return datetime.fromtimestamp(_decode(token)["exp"], tz=timezone.utc)


def is_token_valid(token: str, user: User) -> bool:
    """True if ``token`` is signed by us, unexpired and issued to ``user``."""
    try:
        return extract_username(token) == user.username
    except InvalidTokenError:
        return False

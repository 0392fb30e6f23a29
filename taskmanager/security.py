"""Bearer-token resolution for incoming requests.

Resolution never raises: any failure leaves the request anonymous and the
reason is only logged. Endpoints that need an identity depend on
:func:`get_current_user`, which turns an anonymous request into a 401.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .database import get_db
from .errors import UnauthorizedError
from .logging import get_logger
from .models import Token, User
from .services import tokens
from .services.auth import BEARER_PREFIX, find_user_by_username

logger = get_logger(__name__)

AUTH_PATH_PREFIX = "/api/v1/auth"


@dataclass(frozen=True)
class AuthResolution:
    user: Optional[User] = None
    reason: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.user is not None


def find_token(db: Session, token: str) -> Optional[Token]:
    return db.query(Token).filter(Token.token == token).first()


def resolve_identity(db: Session, path: str, authorization: Optional[str]) -> AuthResolution:
    """Work out who is calling from the path and Authorization header."""
    if path.startswith(AUTH_PATH_PREFIX):
        return AuthResolution(reason="auth_endpoint")
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.debug("no_bearer_token", path=path)
        return AuthResolution(reason="missing_bearer")

    jwt_token = authorization[len(BEARER_PREFIX):]
    username = None
    try:
        username = tokens.extract_username(jwt_token)
        user = find_user_by_username(db, username)
        if user is None:
            return AuthResolution(reason="unknown_user")

        record = find_token(db, jwt_token)
        if record is None:
            return AuthResolution(reason="unknown_token")
        if record.revoked or record.expired:
            return AuthResolution(reason="token_revoked")
        if not tokens.is_token_valid(jwt_token, user):
            return AuthResolution(reason="token_invalid")
    except Exception as exc:
        logger.warning(
            "bearer_resolution_failed",
            path=path,
            username=username,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return AuthResolution(reason=type(exc).__name__)

    logger.debug("request_authenticated", path=path, user_id=user.id)
    return AuthResolution(user=user)


def authenticate_request(request: Request, db: Session) -> AuthResolution:
    """Resolve the request identity once and keep it on ``request.state``."""
    resolution = getattr(request.state, "auth", None)
    if resolution is None:
        resolution = resolve_identity(
            db, request.url.path, request.headers.get("Authorization")
        )
        request.state.auth = resolution
    return resolution


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Dependency returning the authenticated user or raising 401."""
    resolution = authenticate_request(request, db)
    if not resolution.authenticated:
        raise UnauthorizedError("Not authenticated")
    return resolution.user

"""Registration, login and token refresh.

Every issuance revokes the user's previously valid tokens before the new
access token is stored, so each user has at most one live session.
"""
from typing import List, Optional

import bcrypt
from sqlalchemy.orm import Session

from ..config import BCRYPT_ROUNDS
from ..errors import AlreadyExistsError, InvalidCredentialsError, NotFoundError
from ..logging import get_logger
from ..models import Token, TokenType, User
from ..schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from . import tokens

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def find_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def find_valid_tokens_for_user(db: Session, user: User) -> List[Token]:
    return (
        db.query(Token)
        .filter(
            Token.user_id == user.id,
            Token.expired.is_(False),
            Token.revoked.is_(False),
        )
        .all()
    )


def save_user_token(db: Session, user: User, jwt_token: str) -> Token:
    token = Token(
        user_id=user.id,
        token=jwt_token,
        token_type=TokenType.BEARER,
        expired=False,
        revoked=False,
    )
    db.add(token)
    return token


def revoke_all_user_tokens(db: Session, user: User) -> int:
    valid_tokens = find_valid_tokens_for_user(db, user)
    for token in valid_tokens:
        token.expired = True
        token.revoked = True
    db.add_all(valid_tokens)
    return len(valid_tokens)


def _issue_access_token(db: Session, user: User) -> str:
    access_token = tokens.generate_token(user)
    revoked = revoke_all_user_tokens(db, user)
    save_user_token(db, user, access_token)
    db.commit()
    logger.info("access_token_issued", user_id=user.id, revoked_tokens=revoked)
    return access_token


def _auth_response(user: User, access_token: str, refresh_token: str) -> AuthResponse:
    return AuthResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=tokens.extract_expiration(access_token),
        user=UserResponse.model_validate(user),
    )


def register(db: Session, request: RegisterRequest) -> AuthResponse:
    """Create a user and open its first session."""
    if find_user_by_email(db, request.email):
        raise AlreadyExistsError(f"User with email {request.email} already exists")
    if find_user_by_username(db, request.username):
        raise AlreadyExistsError(f"User with username {request.username} already exists")

    user = User(
        username=request.username,
        email=request.email,
        hashed_password=get_password_hash(request.password),
        role=request.role,
    )
    db.add(user)
    db.flush()

    refresh_token = tokens.generate_refresh_token(user)
    access_token = _issue_access_token(db, user)
    db.refresh(user)
    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return _auth_response(user, access_token, refresh_token)


def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
    user = find_user_by_username(db, username)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def login(db: Session, request: LoginRequest) -> AuthResponse:
    """Check credentials and rotate the user's session."""
    user = authenticate_user(db, request.username, request.password)
    if not user:
        logger.info("login_failed", username=request.username)
        raise InvalidCredentialsError("Incorrect username or password")

    refresh_token = tokens.generate_refresh_token(user)
    access_token = _issue_access_token(db, user)
    db.refresh(user)
    return _auth_response(user, access_token, refresh_token)


def refresh_token(db: Session, authorization: Optional[str]) -> Optional[AuthResponse]:
    """Mint a new access token from the refresh token in ``authorization``.

    Returns None without touching the store when the header is missing, is
    not a bearer header, or the token does not belong to its subject.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None

    refresh = authorization[len(BEARER_PREFIX):]
    username = tokens.extract_username(refresh)
    user = find_user_by_username(db, username)
    if user is None:
        raise NotFoundError(f"User {username} not found")

    if not tokens.is_token_valid(refresh, user):
        return None

    access_token = _issue_access_token(db, user)
    db.refresh(user)
    return _auth_response(user, access_token, refresh)

"""Unit tests for registration, login and refresh.

Tests for:
- Password hashing
- Duplicate detection at registration
- Single active session after every issuance
- Lenient refresh handling
"""

import pytest

from taskmanager.errors import AlreadyExistsError, InvalidCredentialsError, InvalidTokenError, NotFoundError
from taskmanager.models import Role, Token, User
from taskmanager.schemas.user import LoginRequest, RegisterRequest
from taskmanager.services import auth as auth_service
from taskmanager.services import tokens


def _register(db, username="alice", email=None, role=Role.USER):
    return auth_service.register(
        db,
        RegisterRequest(
            username=username,
            email=email or f"{username}@example.com",
            password="secret-pass",
            role=role,
        ),
    )


def _valid_tokens(db, user_id):
    return (
        db.query(Token)
        .filter(Token.user_id == user_id, Token.revoked.is_(False), Token.expired.is_(False))
        .all()
    )


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = auth_service.get_password_hash("secret-pass")
        assert hashed != "secret-pass"
        assert auth_service.verify_password("secret-pass", hashed)

    def test_wrong_password_fails(self):
        hashed = auth_service.get_password_hash("secret-pass")
        assert not auth_service.verify_password("other", hashed)

    def test_long_passwords_are_accepted(self):
        password = "p" * 100
        assert auth_service.verify_password(password, auth_service.get_password_hash(password))


class TestRegister:
    def test_register_returns_identity_and_tokens(self, db):
        response = _register(db, role=Role.ADMIN)

        assert response.user.username == "alice"
        assert response.user.role == Role.ADMIN
        assert tokens.extract_username(response.access_token) == "alice"
        assert tokens.extract_username(response.refresh_token) == "alice"
        assert response.access_token != response.refresh_token

    def test_register_stores_hashed_password(self, db):
        _register(db)
        user = db.query(User).filter(User.username == "alice").one()
        assert user.hashed_password != "secret-pass"

    def test_register_persists_single_access_token(self, db):
        response = _register(db)
        valid = _valid_tokens(db, response.user.id)
        assert [token.token for token in valid] == [response.access_token]

    def test_duplicate_email_rejected(self, db):
        _register(db)
        with pytest.raises(AlreadyExistsError):
            _register(db, username="alice2", email="alice@example.com")

    def test_duplicate_username_rejected(self, db):
        _register(db)
        with pytest.raises(AlreadyExistsError):
            _register(db, email="other@example.com")


class TestLogin:
    def test_login_rotates_tokens(self, db):
        first = _register(db)
        second = auth_service.login(db, LoginRequest(username="alice", password="secret-pass"))

        old = db.query(Token).filter(Token.token == first.access_token).one()
        db.refresh(old)
        assert old.revoked and old.expired
        valid = _valid_tokens(db, first.user.id)
        assert [token.token for token in valid] == [second.access_token]

    def test_wrong_password(self, db):
        _register(db)
        with pytest.raises(InvalidCredentialsError):
            auth_service.login(db, LoginRequest(username="alice", password="nope"))

    def test_unknown_user(self, db):
        with pytest.raises(InvalidCredentialsError):
            auth_service.login(db, LoginRequest(username="ghost", password="nope"))


class TestRefreshToken:
    def test_missing_header_is_noop(self, db):
        assert auth_service.refresh_token(db, None) is None

    def test_non_bearer_header_is_noop(self, db):
        registered = _register(db)
        assert auth_service.refresh_token(db, f"Basic {registered.refresh_token}") is None
        assert len(_valid_tokens(db, registered.user.id)) == 1

    def test_refresh_issues_new_access_token(self, db):
        registered = _register(db)
        refreshed = auth_service.refresh_token(db, f"Bearer {registered.refresh_token}")

        assert refreshed is not None
        assert refreshed.refresh_token == registered.refresh_token
        assert refreshed.access_token != registered.access_token
        valid = _valid_tokens(db, registered.user.id)
        assert [token.token for token in valid] == [refreshed.access_token]

    def test_invalid_token_raises(self, db):
        with pytest.raises(InvalidTokenError):
            auth_service.refresh_token(db, "Bearer not-a-jwt")

    def test_unknown_user_propagates(self, db):
        ghost = User(username="ghost", email="ghost@example.com", hashed_password="x")
        with pytest.raises(NotFoundError):
            auth_service.refresh_token(db, f"Bearer {tokens.generate_refresh_token(ghost)}")

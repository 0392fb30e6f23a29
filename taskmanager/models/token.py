from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4
import enum

from .user import utc_now


class TokenType(str, enum.Enum):
    BEARER = "BEARER"


class Token(SQLModel, table=True):
    """Issued access token kept for server-side revocation.

    A record counts as live only while both ``expired`` and ``revoked`` are
    false; the JWT itself still has to pass signature and expiry checks.
    """
    __tablename__ = "tokens"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    token: str = Field(unique=True, index=True)
    token_type: TokenType = Field(default=TokenType.BEARER)
    expired: bool = Field(default=False)
    revoked: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    user_id: str = Field(foreign_key="users.id", index=True)

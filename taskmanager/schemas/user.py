from pydantic import BaseModel, Field, computed_field
from datetime import datetime
from typing import List

from ..models.user import Role
from ..permissions import authorities_for


class UserBase(BaseModel):
    username: str
    email: str


class RegisterRequest(UserBase):
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    role: Role = Role.USER


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(UserBase):
    """User projection returned by the API; never carries the password hash."""
    id: str
    role: Role
    created_at: datetime

    @computed_field
    @property
    def authorities(self) -> List[str]:
        return authorities_for(self.role)

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse

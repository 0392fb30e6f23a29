from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import permissions
from ..database import get_db
from ..models import User
from ..schemas.user import UserResponse
from ..security import get_current_user

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def list_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List every user, for assignee pickers."""
    permissions.authorize(current_user, permissions.READ_USERS)
    users = db.query(User).order_by(User.username.asc()).all()
    return [UserResponse.model_validate(user) for user in users]


@router.get("/me", response_model=UserResponse)
def read_users_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return UserResponse.model_validate(current_user)

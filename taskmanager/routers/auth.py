from typing import Optional

from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.user import AuthResponse, LoginRequest, RegisterRequest
from ..services import auth as auth_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create a user account and return its first token pair."""
    return auth_service.register(db, request)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Sign in and rotate the user's session tokens."""
    return auth_service.login(db, request)


@router.post(
    "/refresh-token",
    response_model=AuthResponse,
    responses={204: {"description": "No usable refresh token supplied"}},
)
def refresh_token(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    """Exchange the bearer refresh token for a new access token."""
    result = auth_service.refresh_token(db, authorization)
    if result is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return result

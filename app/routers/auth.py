"""Authentication API endpoints.

Domain errors raised by the account directory propagate to the handler
registered in ``main.py``, which maps them to status codes.
"""

import logging
import time

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.exceptions import UnauthenticatedError
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    UpdateProfileRequest,
    UserCreatedResponse,
    UserExistsResponse,
)
from app.services.accounts import get_account_directory
from app.services.jwt import get_jwt_service

logger = logging.getLogger("water_temperature")

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.get("/users/exists", response_model=UserExistsResponse)
def users_exist(db: Session = Depends(get_db)) -> UserExistsResponse:
    """Report whether any account has been registered yet."""
    return UserExistsResponse(exists=get_account_directory().exists_any(db))


@router.post("/register", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)) -> UserCreatedResponse:
    """Register the account."""
    user = get_account_directory().register(
        db,
        body.user_name,
        body.password,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserCreatedResponse(id=user.id, user_name=user.user_name)


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate and receive a JWT token."""
    delay_ms = get_settings().LOGIN_DELAY_MS
    if delay_ms > 0:
        time.sleep(delay_ms / 1000)

    try:
        user = get_account_directory().authenticate(db, body.user_name, body.password)
    except UnauthenticatedError:
        logger.info("Failed login for username %r", body.user_name)
        raise

    jwt_service = get_jwt_service()
    return LoginResponse(
        token=jwt_service.create_token(user),
        expires_in=jwt_service.expires_in_seconds,
        profile=ProfileResponse.from_user(user),
    )


@router.get("/profile", response_model=ProfileResponse)
def get_profile(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> ProfileResponse:
    """Return the profile of the authenticated account."""
    account = get_account_directory().get_profile(db, user.user_id)
    return ProfileResponse.from_user(account)


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    body: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    """Update email, names or picture. Blank values clear a field."""
    account = get_account_directory().update_profile(db, user.user_id, body.changes())
    return ProfileResponse.from_user(account)


@router.post("/profile/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Change the password of the authenticated account."""
    get_account_directory().change_password(db, user.user_id, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")

"""
Authentication Router

Endpoints for registration, token issue and the current user.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from src.estatedesk.api.auth import (
    authenticate_user,
    create_user_token,
    get_current_active_user,
    get_password_hash,
    user_repository,
)
from src.estatedesk.api.dependencies import get_db
from src.estatedesk.api.schemas import ApiResponse, Token, UserOut, UserRegister
from src.estatedesk.core.enums import AccountStatus
from src.estatedesk.db.models import User
from src.estatedesk.exceptions import BadRequestError
from src.estatedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["authentication"])


@router.post("/register", response_model=ApiResponse[UserOut], status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account.

    Raises:
        BadRequestError: If the email is already registered
    """
    email = payload.email.strip().lower()
    if user_repository.get_by_email(db, email) is not None:
        raise BadRequestError("Email is already registered")

    user = user_repository.create(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        hashed_password=get_password_hash(payload.password),
        phone=payload.phone,
        role=payload.role,
        status=AccountStatus.ACTIVE.value,
    )
    db.commit()

    logger.info("user_registered", user_id=user.id, role=user.role)
    return {"success": True, "data": user}


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    OAuth2 compatible token login (username is the account email).

    Raises:
        HTTPException: If authentication fails
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.status != AccountStatus.ACTIVE.value:
        raise HTTPException(status_code=400, detail="Inactive user")

    user.last_login = datetime.now(timezone.utc)
    db.commit()

    logger.info("user_logged_in", user_id=user.id)
    return {"access_token": create_user_token(user), "token_type": "bearer"}


@router.get("/users/me", response_model=ApiResponse[UserOut])
def read_users_me(current_user: User = Depends(get_current_active_user)):
    """
    Get current user information.
    """
    return {"success": True, "data": current_user}

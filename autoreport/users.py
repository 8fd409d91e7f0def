import logging

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from autoreport.config import get_settings
from autoreport.database import get_db
from autoreport.errors import NoPendingResetError, NotFoundError
from autoreport.models import User
from autoreport.schemas import (
    MessageResponse,
    ResetConfirm,
    ResetRequest,
    ResetRequestResponse,
    TokenResponse,
    UserPublic,
    UserRegister,
)
from autoreport.security import oauth2_scheme
from autoreport.service import AuthService
from autoreport.store import UserStore

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists with that email, a password reset link has been sent."

# ==========================================================
# ROUTER
# ==========================================================

router = APIRouter(prefix="/auth", tags=["Auth"])

# ==========================================================
# DEPENDENCIES
# ==========================================================

def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(UserStore(db))


def get_current_user(
    token: str = Depends(oauth2_scheme),
    service: AuthService = Depends(get_auth_service),
) -> User:
    user_id = service.authenticate(token)
    return service.get_active_user(user_id)

# ==========================================================
# REGISTER
# ==========================================================

@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, service: AuthService = Depends(get_auth_service)):
    return service.register(user_data.name, user_data.email, user_data.password)

# ==========================================================
# LOGIN
# ==========================================================

@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service),
):
    token = service.login(form_data.username, form_data.password)

    return {
        "access_token": token,
        "token_type": "bearer"
    }

# ==========================================================
# PASSWORD RESET
# ==========================================================

@router.post(
    "/password-reset/request",
    response_model=ResetRequestResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
)
def request_password_reset(data: ResetRequest, service: AuthService = Depends(get_auth_service)):
    response = {"message": RESET_REQUESTED_MESSAGE}

    try:
        token = service.request_reset(data.email)
    except NotFoundError:
        # same answer either way, no account enumeration
        logger.info("Password reset requested for unknown email")
        return response

    if get_settings().expose_reset_token:
        response["reset_token"] = token

    return response


@router.post("/password-reset/confirm", response_model=MessageResponse)
def confirm_password_reset(data: ResetConfirm, service: AuthService = Depends(get_auth_service)):
    try:
        service.confirm_reset(data.email, data.token, data.new_password)
    except NotFoundError as exc:
        logger.info("Password reset confirmation for unknown email")
        raise NoPendingResetError() from exc
    return {"message": "Password updated"}

# ==========================================================
# PROTECTED ROUTE
# ==========================================================

@router.get("/me", response_model=UserPublic)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user

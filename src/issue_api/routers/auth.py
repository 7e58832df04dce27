from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..auth import AuthService, get_auth_service, get_current_user
from ..models import UserEntity
from ..schemas import Credentials, ErrorOut, UserOut

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
)


def _out(user: UserEntity) -> UserOut:
    return UserOut(email=user["email"], disabled=user["disabled"], created_at=user["created_at"])


# PUBLIC_INTERFACE
@router.post(
    "/signup",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Register a new account with an email and password.",
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorOut, "description": "Invalid email or weak password"},
        409: {"model": ErrorOut, "description": "Email already registered"},
    },
)
def sign_up(payload: Credentials, auth_service: AuthService = Depends(get_auth_service)) -> UserOut:
    """
    Register an account. Subsequent requests authenticate with HTTP Basic.
    """
    return _out(auth_service.sign_up(payload.email, payload.password))


# PUBLIC_INTERFACE
@router.post(
    "/signin",
    response_model=UserOut,
    summary="Sign In",
    description="Verify an email and password without creating a session.",
    responses={
        200: {"description": "Credentials accepted"},
        401: {"model": ErrorOut, "description": "Invalid email or password"},
        403: {"model": ErrorOut, "description": "Account disabled"},
        429: {"model": ErrorOut, "description": "Too many failed attempts"},
    },
)
def sign_in(payload: Credentials, auth_service: AuthService = Depends(get_auth_service)) -> UserOut:
    """
    Check credentials and return the account.
    """
    return _out(auth_service.sign_in(payload.email, payload.password))


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserOut, summary="Current User", description="Return the authenticated account.")
def me(user: UserEntity = Depends(get_current_user)) -> UserOut:
    return _out(user)

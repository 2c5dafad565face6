import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_auth_service, get_bearer_token, get_current_user
from api.schemas.auth import (
    CaptchaResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    SignUpResponse,
    UserResponse,
)
from api.schemas.common import SuccessResponse
from deepreview.model.user import User
from deepreview.service.auth_service import AuthError, AuthService
from deepreview.service.captcha_service import generate_captcha

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/captcha", response_model=CaptchaResponse)
def get_captcha():
    """Issue an arithmetic captcha for the sign-up form."""
    question, token = generate_captcha()
    return CaptchaResponse(question=question, token=token)


@router.post("/signup", response_model=SignUpResponse)
def sign_up(
    body: SignUpRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        user = auth.sign_up(
            email=body.email,
            password=body.password,
            confirm_password=body.confirm_password,
            full_name=body.full_name,
            captcha_token=body.captcha_token,
            captcha_answer=body.captcha_answer,
        )
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SignUpResponse(user=UserResponse.from_user(user))


@router.post("/signin", response_model=SignInResponse)
def sign_in(
    body: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        token, user, redirect = auth.sign_in(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"🔑 User signed in: {user.id} ({user.role})")
    return SignInResponse(token=token, user=UserResponse.from_user(user), redirect=redirect)


@router.post("/signout", response_model=SuccessResponse)
def sign_out(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
):
    if token:
        auth.sign_out(token)
    return SuccessResponse(message="Signed out")


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return UserResponse.from_user(user)

from __future__ import annotations

from datetime import datetime

from api.schemas.common import CamelModel
from deepreview.model.user import User


class CaptchaResponse(CamelModel):
    question: str
    token: str


class SignUpRequest(CamelModel):
    # optional on purpose: rule messages come from the auth service, not a 422
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    full_name: str = ""
    captcha_token: str = ""
    captcha_answer: str = ""


class SignInRequest(CamelModel):
    email: str = ""
    password: str = ""


class UserResponse(CamelModel):
    id: str
    email: str
    full_name: str
    role: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            created_at=user.created_at,
        )


class SignUpResponse(CamelModel):
    success: bool = True
    user: UserResponse
    message: str = "Account created successfully"


class SignInResponse(CamelModel):
    token: str
    user: UserResponse
    redirect: str

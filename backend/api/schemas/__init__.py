from .common import CamelModel, SuccessResponse
from .auth import (
    CaptchaResponse,
    SignUpRequest,
    SignUpResponse,
    SignInRequest,
    SignInResponse,
    UserResponse,
)
from .article import (
    ArticleResponse,
    ArticleReadResponse,
    ArticleListResponse,
    UploadResponse,
    AnalyzeRequest,
    AnalyzeResponse,
)
from .socratic import SocraticRequest, SocraticResponse, SessionResponse

__all__ = [
    "CamelModel",
    "SuccessResponse",
    "CaptchaResponse",
    "SignUpRequest",
    "SignUpResponse",
    "SignInRequest",
    "SignInResponse",
    "UserResponse",
    "ArticleResponse",
    "ArticleReadResponse",
    "ArticleListResponse",
    "UploadResponse",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "SocraticRequest",
    "SocraticResponse",
    "SessionResponse",
]

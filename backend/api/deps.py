from typing import Optional

from fastapi import Depends, Header, HTTPException

from deepreview.database.article_repository import ArticleRepository
from deepreview.database.progress_repository import ProgressRepository
from deepreview.model.user import User
from deepreview.service.auth_service import AuthService
from deepreview.service.chat_service import ChatService
from deepreview.service.dashboard_service import DashboardService
from deepreview.service.socratic_service import SocraticService
from deepreview.service.storage_service import ArticleStorage


def get_article_repo() -> ArticleRepository:
    """Return an ArticleRepository instance (stateless, safe to create per-request)."""
    return ArticleRepository()


def get_progress_repo() -> ProgressRepository:
    return ProgressRepository()


def get_auth_service() -> AuthService:
    return AuthService()


def get_chat_service() -> ChatService:
    return ChatService()


def get_socratic_service() -> SocraticService:
    return SocraticService()


def get_dashboard_service() -> DashboardService:
    return DashboardService()


def get_storage() -> ArticleStorage:
    return ArticleStorage()


def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Token from an "Authorization: Bearer <token>" header, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(
    token: Optional[str] = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    user = auth.get_current_user(token)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_instructor(user: User = Depends(get_current_user)) -> User:
    if not user.is_instructor:
        raise HTTPException(status_code=403, detail="Instructor access required")
    return user

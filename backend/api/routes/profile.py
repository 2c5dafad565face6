import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_auth_service, get_current_user, get_dashboard_service, get_progress_repo
from api.schemas.auth import UserResponse
from api.schemas.common import SuccessResponse
from api.schemas.progress import (
    ChangePasswordRequest,
    LatestProgressResponse,
    ProfileResponse,
    ProgressResponse,
    UpdateProfileRequest,
)
from deepreview.database.progress_repository import ProgressRepository
from deepreview.model.user import User
from deepreview.service.auth_service import AuthError, AuthService
from deepreview.service.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(
    user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """Student profile: articles, progress records and activity counts."""
    return ProfileResponse.from_profile(dashboard.student_profile(user))


@router.get("/progress/{article_id}", response_model=LatestProgressResponse)
def get_latest_progress(
    article_id: str,
    user: User = Depends(get_current_user),
    progress: ProgressRepository = Depends(get_progress_repo),
):
    latest = progress.latest_for_article(user.id, article_id)
    return LatestProgressResponse(
        progress=ProgressResponse.from_progress(latest) if latest else None
    )


@router.patch("", response_model=UserResponse)
def update_profile(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        updated = auth.update_profile(user, body.full_name)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UserResponse.from_user(updated)


@router.post("/password", response_model=SuccessResponse)
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    try:
        auth.change_password(user, body.current_password, body.new_password)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info(f"🔑 Password changed for user {user.id}")
    return SuccessResponse(message="Password updated")


@router.delete("", response_model=SuccessResponse)
def delete_account(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Delete the caller's account and everything it owns."""
    if not auth.delete_account(user):
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(f"🗑️ Account deleted: {user.id}")
    return SuccessResponse(message="Account deleted")

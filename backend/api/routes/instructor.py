import logging

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_article_repo, get_dashboard_service, get_storage, require_instructor
from api.schemas.auth import UserResponse
from api.schemas.common import SuccessResponse
from api.schemas.instructor import (
    AnalyticsResponse,
    InstructorArticleListResponse,
    InstructorStatsResponse,
    StudentDetailResponse,
    StudentListResponse,
)
from api.schemas.progress import ProgressResponse
from deepreview.database.article_repository import ArticleRepository
from deepreview.model.user import User
from deepreview.service.dashboard_service import DashboardService
from deepreview.service.storage_service import ArticleStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/instructor", tags=["instructor"])


@router.get("/stats", response_model=InstructorStatsResponse)
def get_stats(
    instructor: User = Depends(require_instructor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return InstructorStatsResponse(**dashboard.instructor_stats())


@router.get("/students", response_model=StudentListResponse)
def list_students(
    instructor: User = Depends(require_instructor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return StudentListResponse(students=dashboard.students())


@router.get("/students/{student_id}", response_model=StudentDetailResponse)
def get_student(
    student_id: str,
    instructor: User = Depends(require_instructor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    detail = dashboard.student_detail(student_id)
    if not detail:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentDetailResponse(
        student=UserResponse.from_user(detail["student"]),
        progress=[ProgressResponse.from_progress(p) for p in detail["progress"]],
    )


@router.get("/articles", response_model=InstructorArticleListResponse)
def list_articles(
    instructor: User = Depends(require_instructor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return InstructorArticleListResponse(articles=dashboard.articles_with_uploader())


@router.delete("/articles/{article_id}", response_model=SuccessResponse)
def delete_article(
    article_id: str,
    instructor: User = Depends(require_instructor),
    repo: ArticleRepository = Depends(get_article_repo),
    storage: ArticleStorage = Depends(get_storage),
):
    """Delete any article (with its chats, sessions and progress)."""
    article = repo.get_article_by_id(article_id)
    if not article or not repo.delete(article_id):
        raise HTTPException(status_code=404, detail="Article not found")

    storage.delete(article.storage_path)
    logger.info(f"🗑️ Article {article_id} deleted by instructor {instructor.id}")
    return SuccessResponse(message="Article deleted")


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    instructor: User = Depends(require_instructor),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    return AnalyticsResponse(**dashboard.analytics())

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from api.schemas.article import ArticleResponse
from api.schemas.auth import UserResponse
from api.schemas.common import CamelModel
from deepreview.model.progress import StudentProgress


class ProgressResponse(CamelModel):
    id: Optional[int] = None
    article_id: str
    session_id: Optional[str] = None
    final_average_score: Optional[float] = None
    question_scores: List[float]
    difficulty_path: List[int]
    comprehension_score: Optional[int] = None
    critical_thinking_score: Optional[int] = None
    quality_score: Optional[int] = None
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[str]
    created_at: datetime
    article_title: Optional[str] = None
    article_authors: Optional[List[str]] = None

    @classmethod
    def from_progress(cls, progress: StudentProgress) -> ProgressResponse:
        return cls(**progress.model_dump(exclude={"user_id"}))


class ProgressListResponse(CamelModel):
    progress: List[ProgressResponse]


class LatestProgressResponse(CamelModel):
    progress: Optional[ProgressResponse] = None


# --- Student profile ---

class ProfileResponse(CamelModel):
    user: UserResponse
    articles: List[ArticleResponse]
    progress: List[ProgressResponse]
    total_messages: int
    messages_per_article: Dict[str, int]
    total_questions: int
    questions_per_article: Dict[str, int]

    @classmethod
    def from_profile(cls, profile: Dict[str, Any]) -> ProfileResponse:
        return cls(
            user=UserResponse.from_user(profile["user"]),
            articles=[ArticleResponse.from_article(a) for a in profile["articles"]],
            progress=[ProgressResponse.from_progress(p) for p in profile["progress"]],
            total_messages=profile["total_messages"],
            messages_per_article=profile["messages_per_article"],
            total_questions=profile["total_questions"],
            questions_per_article=profile["questions_per_article"],
        )


class UpdateProfileRequest(CamelModel):
    full_name: str = ""


class ChangePasswordRequest(CamelModel):
    current_password: str = ""
    new_password: str = ""

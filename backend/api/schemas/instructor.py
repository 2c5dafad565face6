from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from api.schemas.auth import UserResponse
from api.schemas.common import CamelModel
from api.schemas.progress import ProgressResponse


class InstructorStatsResponse(CamelModel):
    total_students: int
    total_articles: int
    completed_sessions: int
    average_score: int


class StudentSummary(CamelModel):
    id: str
    email: str
    full_name: str
    created_at: datetime
    total_sessions: int
    average_score: int


class StudentListResponse(CamelModel):
    students: List[StudentSummary]


class StudentDetailResponse(CamelModel):
    student: UserResponse
    progress: List[ProgressResponse]


class Uploader(CamelModel):
    full_name: str
    email: str


class InstructorArticle(CamelModel):
    id: str
    user_id: str
    title: str
    authors: List[str]
    uploaded_at: datetime
    analysis_completed: bool
    uploader: Optional[Uploader] = None


class InstructorArticleListResponse(CamelModel):
    articles: List[InstructorArticle]


class ScorePoint(CamelModel):
    created_at: datetime
    final_average_score: Optional[float] = None


class ScoreValue(CamelModel):
    final_average_score: Optional[float] = None


class TopStudent(CamelModel):
    user_id: str
    final_average_score: Optional[float] = None
    full_name: Optional[str] = None


class AnalyticsResponse(CamelModel):
    progress_over_time: List[ScorePoint]
    score_distribution: List[ScoreValue]
    top_students: List[TopStudent]

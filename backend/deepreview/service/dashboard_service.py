# deepreview/service/dashboard_service.py

"""
Dashboard Service - read-only aggregates for the student profile page and
the instructor dashboard.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from deepreview.database.article_repository import ArticleRepository
from deepreview.database.message_repository import MessageRepository
from deepreview.database.progress_repository import ProgressRepository
from deepreview.database.socratic_repository import SocraticRepository
from deepreview.database.user_repository import UserRepository
from deepreview.model.user import User


def rounded_mean(values: List[float]) -> int:
    """Mean rounded half up (72.5 -> 73)."""
    if not values:
        return 0
    return int(math.floor(sum(values) / len(values) + 0.5))


SCORE_RANGES = ["90-100", "80-89", "70-79", "60-69", "0-59"]


def score_ranges(scores: List[Optional[float]]) -> Dict[str, int]:
    """Histogram of final scores over the dashboard's grade bands."""
    counts = {label: 0 for label in SCORE_RANGES}
    for score in scores:
        score = score or 0
        if score >= 90:
            counts["90-100"] += 1
        elif score >= 80:
            counts["80-89"] += 1
        elif score >= 70:
            counts["70-79"] += 1
        elif score >= 60:
            counts["60-69"] += 1
        else:
            counts["0-59"] += 1
    return counts


class DashboardService:

    def __init__(
        self,
        users: Optional[UserRepository] = None,
        articles: Optional[ArticleRepository] = None,
        messages: Optional[MessageRepository] = None,
        sessions: Optional[SocraticRepository] = None,
        progress: Optional[ProgressRepository] = None,
    ):
        self.users = users or UserRepository()
        self.articles = articles or ArticleRepository()
        self.messages = messages or MessageRepository()
        self.sessions = sessions or SocraticRepository()
        self.progress = progress or ProgressRepository()

    # =====================================================
    # Student
    # =====================================================

    def student_profile(self, user: User) -> Dict[str, Any]:
        total_questions, questions_per_article = self.sessions.questions_asked_by_user(user.id)
        return {
            "user": user,
            "articles": self.articles.list_by_user(user.id),
            "progress": self.progress.list_for_user(user.id),
            "total_messages": self.messages.count_by_user(user.id),
            "messages_per_article": self.messages.count_per_article(user.id),
            "total_questions": total_questions,
            "questions_per_article": questions_per_article,
        }

    # =====================================================
    # Instructor
    # =====================================================

    def instructor_stats(self) -> Dict[str, Any]:
        all_scores = [
            score
            for scores in self.progress.final_scores_by_user().values()
            for score in scores
            if score > 0
        ]
        return {
            "total_students": len(self.users.list_by_role("student")),
            "total_articles": self.articles.count(),
            "completed_sessions": self.sessions.count_completed(),
            "average_score": rounded_mean(all_scores),
        }

    def students(self) -> List[Dict[str, Any]]:
        """Students, newest first, with session count and rounded mean score."""
        scores_by_user = self.progress.final_scores_by_user()
        result = []
        for student in self.users.list_by_role("student"):
            scores = scores_by_user.get(student.id, [])
            result.append({
                "id": student.id,
                "email": student.email,
                "full_name": student.full_name,
                "created_at": student.created_at,
                "total_sessions": len(scores),
                "average_score": rounded_mean(scores),
            })
        return result

    def student_detail(self, student_id: str) -> Optional[Dict[str, Any]]:
        student = self.users.get_user(student_id)
        if not student or student.role != "student":
            return None
        return {
            "student": student,
            "progress": self.progress.list_for_user_with_article(student_id),
        }

    def articles_with_uploader(self) -> List[Dict[str, Any]]:
        return self.articles.list_with_uploader()

    def analytics(self) -> Dict[str, Any]:
        over_time = self.progress.scores_over_time()
        return {
            "progress_over_time": over_time,
            "score_distribution": [
                {"final_average_score": row["final_average_score"]} for row in over_time
            ],
            "top_students": self.progress.top_scores(limit=5),
        }

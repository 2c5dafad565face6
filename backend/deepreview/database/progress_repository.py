from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, desc

from deepreview.model.progress import StudentProgress
from deepreview.database.db.session import SessionLocal
from deepreview.database.db.models import ArticleRow, StudentProgressRow, UserRow

logger = logging.getLogger(__name__)


def safe_parse_json_list(value: Any) -> List[Any]:
    """Decode a JSON-text array column; anything unreadable becomes []."""
    if not value:
        return []
    try:
        parsed = json.loads(value) if isinstance(value, str) else value
    except (TypeError, ValueError):
        logger.warning("Could not decode JSON list column: %.80r", value)
        return []
    return parsed if isinstance(parsed, list) else []


class ProgressRepository:
    """
    student_progress rows: one insert per completed Socratic session.
    """

    def insert(self, progress: StudentProgress) -> StudentProgress:
        with SessionLocal() as db:
            row = StudentProgressRow(
                user_id=progress.user_id,
                article_id=progress.article_id,
                session_id=progress.session_id,
                final_average_score=progress.final_average_score,
                question_scores=json.dumps(progress.question_scores),
                difficulty_path=json.dumps(progress.difficulty_path),
                comprehension_score=progress.comprehension_score,
                critical_thinking_score=progress.critical_thinking_score,
                quality_score=progress.quality_score,
                strengths=json.dumps(progress.strengths),
                weaknesses=json.dumps(progress.weaknesses),
                recommendations=json.dumps(progress.recommendations),
                created_at=progress.created_at,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return self._row_to_progress(row)

    def list_for_user(self, user_id: str, article_id: Optional[str] = None) -> List[StudentProgress]:
        """Progress rows for a user (optionally one article), newest first."""
        with SessionLocal() as db:
            query = select(StudentProgressRow).where(StudentProgressRow.user_id == user_id)
            if article_id is not None:
                query = query.where(StudentProgressRow.article_id == article_id)
            rows = db.execute(
                query.order_by(desc(StudentProgressRow.created_at), desc(StudentProgressRow.id))
            ).scalars().all()
            return [self._row_to_progress(r) for r in rows]

    def latest_for_article(self, user_id: str, article_id: str) -> Optional[StudentProgress]:
        rows = self.list_for_user(user_id, article_id)
        return rows[0] if rows else None

    def list_for_user_with_article(self, user_id: str) -> List[StudentProgress]:
        """Instructor view: progress rows joined with article title/authors."""
        with SessionLocal() as db:
            rows = db.execute(
                select(StudentProgressRow, ArticleRow)
                .outerjoin(ArticleRow, StudentProgressRow.article_id == ArticleRow.id)
                .where(StudentProgressRow.user_id == user_id)
                .order_by(desc(StudentProgressRow.created_at), desc(StudentProgressRow.id))
            ).all()

            result = []
            for row, article in rows:
                progress = self._row_to_progress(row)
                if article is not None:
                    progress.article_title = article.title
                    progress.article_authors = article.authors or []
                result.append(progress)
            return result

    def final_scores_by_user(self) -> Dict[str, List[float]]:
        """user_id -> list of final average scores."""
        with SessionLocal() as db:
            rows = db.execute(
                select(StudentProgressRow.user_id, StudentProgressRow.final_average_score)
            ).all()

        scores: Dict[str, List[float]] = {}
        for user_id, score in rows:
            scores.setdefault(user_id, []).append(score or 0)
        return scores

    def scores_over_time(self) -> List[Dict[str, Any]]:
        with SessionLocal() as db:
            rows = db.execute(
                select(StudentProgressRow.created_at, StudentProgressRow.final_average_score)
                .order_by(StudentProgressRow.created_at)
            ).all()
            return [
                {"created_at": created_at, "final_average_score": score}
                for created_at, score in rows
            ]

    def top_scores(self, limit: int = 5) -> List[Dict[str, Any]]:
        with SessionLocal() as db:
            rows = db.execute(
                select(
                    StudentProgressRow.user_id,
                    StudentProgressRow.final_average_score,
                    UserRow.full_name,
                )
                .outerjoin(UserRow, StudentProgressRow.user_id == UserRow.id)
                .order_by(desc(StudentProgressRow.final_average_score))
                .limit(limit)
            ).all()
            return [
                {"user_id": user_id, "final_average_score": score, "full_name": full_name}
                for user_id, score, full_name in rows
            ]

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_progress(self, row: StudentProgressRow) -> StudentProgress:
        return StudentProgress(
            id=row.id,
            user_id=row.user_id,
            article_id=row.article_id,
            session_id=row.session_id,
            final_average_score=row.final_average_score,
            question_scores=safe_parse_json_list(row.question_scores),
            difficulty_path=safe_parse_json_list(row.difficulty_path),
            comprehension_score=row.comprehension_score,
            critical_thinking_score=row.critical_thinking_score,
            quality_score=row.quality_score,
            strengths=safe_parse_json_list(row.strengths),
            weaknesses=safe_parse_json_list(row.weaknesses),
            recommendations=safe_parse_json_list(row.recommendations),
            created_at=row.created_at,
        )

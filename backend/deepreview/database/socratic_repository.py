from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime

from sqlalchemy import select, desc, func

from deepreview.model.socratic import AnswerRecord, SocraticSession
from deepreview.database.db.session import SessionLocal
from deepreview.database.db.models import SocraticSessionRow

logger = logging.getLogger(__name__)


class SocraticRepository:
    """
    Socratic sessions. Question/answer arrays live in JSON columns and the
    *_count columns are recomputed from them on every write.
    """

    def create_session(self, article_id: str, user_id: str, start_level: int) -> SocraticSession:
        now = datetime.utcnow()
        with SessionLocal() as db:
            row = SocraticSessionRow(
                id=str(uuid.uuid4()),
                article_id=article_id,
                user_id=user_id,
                questions_asked=[],
                questions_answered=[],
                questions_asked_count=0,
                questions_answered_count=0,
                current_level=start_level,
                is_completed=False,
                created_at=now,
                updated_at=now,
            )
            db.add(row)
            db.commit()
            return self._row_to_session(row)

    def get_session(self, session_id: str, user_id: str) -> Optional[SocraticSession]:
        """Session owned by user_id, or None."""
        with SessionLocal() as db:
            row = db.get(SocraticSessionRow, session_id)
            if not row or row.user_id != user_id:
                return None
            return self._row_to_session(row)

    def get_active_session(self, article_id: str, user_id: str) -> Optional[SocraticSession]:
        """Newest non-completed session for this user and article."""
        with SessionLocal() as db:
            row = db.execute(
                select(SocraticSessionRow)
                .where(SocraticSessionRow.article_id == article_id)
                .where(SocraticSessionRow.user_id == user_id)
                .where(SocraticSessionRow.is_completed.is_(False))
                .order_by(desc(SocraticSessionRow.created_at))
                .limit(1)
            ).scalar_one_or_none()
            return self._row_to_session(row) if row else None

    def save_state(self, session: SocraticSession) -> bool:
        """Persist arrays, counts, level and completion flag."""
        with SessionLocal() as db:
            row = db.get(SocraticSessionRow, session.id)
            if not row or row.user_id != session.user_id:
                return False

            row.questions_asked = list(session.questions_asked)
            row.questions_answered = [
                a.model_dump(by_alias=True) for a in session.questions_answered
            ]
            row.questions_asked_count = len(session.questions_asked)
            row.questions_answered_count = len(session.questions_answered)
            row.current_level = session.current_level
            row.is_completed = session.is_completed
            row.updated_at = datetime.utcnow()

            db.commit()
            return True

    # =====================================================
    # Aggregates
    # =====================================================

    def count_completed(self) -> int:
        with SessionLocal() as db:
            count = db.execute(
                select(func.count(SocraticSessionRow.id))
                .where(SocraticSessionRow.is_completed.is_(True))
            ).scalar()
            return count or 0

    def questions_asked_by_user(self, user_id: str) -> Tuple[int, Dict[str, int]]:
        """(total questions asked, questions asked per article) for one user."""
        with SessionLocal() as db:
            rows = db.execute(
                select(SocraticSessionRow.article_id, SocraticSessionRow.questions_asked_count)
                .where(SocraticSessionRow.user_id == user_id)
            ).all()

        total = 0
        per_article: Dict[str, int] = {}
        for article_id, count in rows:
            count = count or 0
            total += count
            per_article[article_id] = per_article.get(article_id, 0) + count
        return total, per_article

    def list_created_at(self, session_ids: List[str]) -> Dict[str, datetime]:
        if not session_ids:
            return {}
        with SessionLocal() as db:
            rows = db.execute(
                select(SocraticSessionRow.id, SocraticSessionRow.created_at)
                .where(SocraticSessionRow.id.in_(session_ids))
            ).all()
            return {sid: created for sid, created in rows}

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_session(self, row: SocraticSessionRow) -> SocraticSession:
        return SocraticSession(
            id=row.id,
            article_id=row.article_id,
            user_id=row.user_id,
            questions_asked=[str(q) for q in _as_list(row.questions_asked)],
            questions_answered=[
                AnswerRecord.model_validate(a)
                for a in _as_list(row.questions_answered)
                if isinstance(a, dict)
            ],
            current_level=row.current_level or 3,
            is_completed=bool(row.is_completed),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if value:
        logger.warning("Unexpected non-list session column: %r", type(value))
    return []

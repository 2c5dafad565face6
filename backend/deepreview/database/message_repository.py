# deepreview/database/message_repository.py

"""
Message Repository - append-only chat log per (article, user)

- append messages
- read history in order
- clear history
- counts for the profile page
"""

from __future__ import annotations

from typing import Dict, List, Optional
from datetime import datetime

from sqlalchemy import select, func

from deepreview.model.chat import Message
from deepreview.database.db.session import SessionLocal
from deepreview.database.db.models import ArticleRow, MessageRow


class MessageRepository:

    def add_message(
        self,
        article_id: str,
        user_id: str,
        role: str,
        content: str,
    ) -> Optional[Message]:
        """
        Append a message to the log.

        Returns:
            the stored message, or None when the article does not exist
        """
        with SessionLocal() as db:
            if not db.get(ArticleRow, article_id):
                return None

            row = MessageRow(
                article_id=article_id,
                user_id=user_id,
                role=role,
                content=content,
                created_at=datetime.utcnow(),
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return self._row_to_message(row)

    def get_messages(self, article_id: str, user_id: str) -> List[Message]:
        """Chat history for one user on one article, oldest first."""
        with SessionLocal() as db:
            rows = db.execute(
                select(MessageRow)
                .where(MessageRow.article_id == article_id)
                .where(MessageRow.user_id == user_id)
                .order_by(MessageRow.created_at, MessageRow.id)
            ).scalars().all()
            return [self._row_to_message(r) for r in rows]

    def clear(self, article_id: str, user_id: str) -> int:
        """Delete one user's history on an article. Returns the number removed."""
        with SessionLocal() as db:
            rows = db.execute(
                select(MessageRow)
                .where(MessageRow.article_id == article_id)
                .where(MessageRow.user_id == user_id)
            ).scalars().all()
            for row in rows:
                db.delete(row)
            db.commit()
            return len(rows)

    def count_by_user(self, user_id: str) -> int:
        with SessionLocal() as db:
            count = db.execute(
                select(func.count(MessageRow.id)).where(MessageRow.user_id == user_id)
            ).scalar()
            return count or 0

    def count_per_article(self, user_id: str) -> Dict[str, int]:
        with SessionLocal() as db:
            rows = db.execute(
                select(MessageRow.article_id, func.count(MessageRow.id))
                .where(MessageRow.user_id == user_id)
                .group_by(MessageRow.article_id)
            ).all()
            return {article_id: count for article_id, count in rows}

    def _row_to_message(self, row: MessageRow) -> Message:
        return Message(
            id=row.id,
            article_id=row.article_id,
            user_id=row.user_id,
            role=row.role,
            content=row.content,
            created_at=row.created_at,
        )

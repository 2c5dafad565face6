from __future__ import annotations

from typing import Any, Dict, List, Optional
from datetime import datetime

from sqlalchemy import select, func

from deepreview.model.article import Article
from deepreview.database.db.session import SessionLocal
from deepreview.database.db.models import ArticleRow, UserRow


class ArticleRepository:
    """
    Postgres repository for Article.
    """

    # =====================================================
    # Basic CRUD
    # =====================================================

    def insert(self, article: Article) -> Article:
        with SessionLocal() as db:
            row = ArticleRow(**article.model_dump())
            db.add(row)
            db.commit()
            return self._row_to_article(row)

    def get_article_by_id(self, article_id: str) -> Optional[Article]:
        with SessionLocal() as db:
            row = db.get(ArticleRow, article_id)
            if not row:
                return None
            return self._row_to_article(row)

    def delete(self, article_id: str, user_id: Optional[str] = None) -> bool:
        """
        Delete an article (and its chats, sessions and progress).

        When user_id is given only the owner's article is deleted.
        """
        with SessionLocal() as db:
            row = db.get(ArticleRow, article_id)
            if not row:
                return False
            if user_id is not None and row.user_id != user_id:
                return False
            db.delete(row)
            db.commit()
            return True

    # =====================================================
    # Partial update (analysis)
    # =====================================================

    def update_fields(self, article_id: str, **fields: Any) -> Optional[Article]:
        """
        Update selected columns of an article.
        """
        unknown = [f for f in fields if f not in Article.model_fields]
        if unknown:
            raise ValueError(f"Fields {unknown} are not valid Article fields")

        with SessionLocal() as db:
            row: Optional[ArticleRow] = db.get(ArticleRow, article_id)
            if not row:
                return None
            for field, value in fields.items():
                setattr(row, field, value)
            db.commit()
            return self._row_to_article(row)

    # =====================================================
    # Pagination & listings
    # =====================================================

    def list(self, limit: int = 6, offset: int = 0) -> List[Article]:
        """
        List all articles, newest upload first.
        """
        with SessionLocal() as db:
            rows = db.execute(
                select(ArticleRow)
                .order_by(ArticleRow.uploaded_at.desc())
                .offset(offset)
                .limit(limit)
            ).scalars().all()
            return [self._row_to_article(r) for r in rows]

    def count(self) -> int:
        with SessionLocal() as db:
            return db.execute(select(func.count(ArticleRow.id))).scalar() or 0

    def list_by_user(self, user_id: str) -> List[Article]:
        with SessionLocal() as db:
            rows = db.execute(
                select(ArticleRow)
                .where(ArticleRow.user_id == user_id)
                .order_by(ArticleRow.uploaded_at.desc())
            ).scalars().all()
            return [self._row_to_article(r) for r in rows]

    def list_with_uploader(self) -> List[Dict[str, Any]]:
        """
        All articles with uploader name/email, newest first (instructor view).
        """
        with SessionLocal() as db:
            rows = db.execute(
                select(ArticleRow, UserRow)
                .outerjoin(UserRow, ArticleRow.user_id == UserRow.id)
                .order_by(ArticleRow.uploaded_at.desc())
            ).all()

            return [
                {
                    "id": article.id,
                    "user_id": article.user_id,
                    "title": article.title,
                    "authors": article.authors or [],
                    "uploaded_at": article.uploaded_at,
                    "analysis_completed": bool(article.analysis_completed),
                    "uploader": (
                        {"full_name": user.full_name, "email": user.email}
                        if user
                        else None
                    ),
                }
                for article, user in rows
            ]

    # =====================================================
    # Helper Methods
    # =====================================================

    def _row_to_article(self, row: ArticleRow) -> Article:
        return Article(
            id=row.id,
            user_id=row.user_id,
            title=row.title,
            authors=row.authors or [],
            abstract=row.abstract,
            full_text=row.full_text,
            keywords=row.keywords or [],
            main_topics=row.main_topics or [],
            pages=row.pages,
            publication_year=row.publication_year,
            storage_path=row.storage_path,
            analysis_completed=bool(row.analysis_completed),
            created_at=row.created_at or datetime.utcnow(),
            uploaded_at=row.uploaded_at or datetime.utcnow(),
        )

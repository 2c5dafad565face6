from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from api.schemas.common import CamelModel
from deepreview.model.article import Article


# --- Card (list view) ---

class ArticleResponse(CamelModel):
    id: str
    user_id: str
    title: str
    authors: List[str]
    abstract: Optional[str] = None
    keywords: List[str]
    main_topics: List[str]
    pages: Optional[int] = None
    publication_year: Optional[int] = None
    analysis_completed: bool
    uploaded_at: datetime

    @classmethod
    def from_article(cls, article: Article) -> ArticleResponse:
        return cls(**article.model_dump(exclude={"full_text", "storage_path", "created_at"}))


# --- Read view (owner only, carries the text) ---

class ArticleReadResponse(ArticleResponse):
    full_text: Optional[str] = None
    storage_path: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_article(cls, article: Article) -> ArticleReadResponse:
        return cls(**article.model_dump())


class ArticleListResponse(CamelModel):
    data: List[ArticleResponse]
    total: int
    limit: int
    offset: int


class UploadResponse(CamelModel):
    success: bool = True
    article: ArticleResponse
    message: str


# --- Analysis ---

class AnalyzeRequest(CamelModel):
    article_id: Optional[str] = None


class AnalysisData(CamelModel):
    title: str
    authors: List[str]
    abstract: Optional[str] = None
    keywords: List[str]
    publication_year: Optional[int] = None
    main_topics: List[str]


class AnalyzeResponse(CamelModel):
    success: bool = True
    message: str = "Analysis completed"
    data: AnalysisData

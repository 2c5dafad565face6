import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile

from api.deps import get_article_repo, get_current_user, get_storage
from api.schemas.article import (
    ArticleListResponse,
    ArticleReadResponse,
    ArticleResponse,
    UploadResponse,
)
from api.schemas.common import SuccessResponse
from deepreview.config import Config
from deepreview.database.article_repository import ArticleRepository
from deepreview.jobs.article_analysis_job import run_article_analysis_job
from deepreview.model.article import Article
from deepreview.model.user import User
from deepreview.service.pdf_parser_service import extract_pdf_text
from deepreview.service.storage_service import ArticleStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["articles"])

TEXT_EXTRACTION_FAILED = "Text extraction failed"


def _is_pdf(file: UploadFile) -> bool:
    if file.content_type == "application/pdf":
        return True
    return (file.filename or "").lower().endswith(".pdf") and file.content_type in (
        None,
        "",
        "application/octet-stream",
    )


@router.post("/api/upload", response_model=UploadResponse)
def upload_article(
    background_tasks: BackgroundTasks,
    file: Optional[UploadFile] = File(default=None),
    title: Optional[str] = Form(default=None),
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    storage: ArticleStorage = Depends(get_storage),
):
    """Upload a PDF, extract its text and schedule the analysis job."""
    if file is None or not title or not title.strip():
        raise HTTPException(status_code=400, detail="Missing file or title")
    if not _is_pdf(file):
        raise HTTPException(status_code=400, detail="Only PDF files are supported")

    data = file.file.read()

    try:
        full_text, pages = extract_pdf_text(data)
    except Exception as e:
        logger.error(f"❌ PDF parse error for {file.filename!r}: {e}")
        full_text, pages = TEXT_EXTRACTION_FAILED, 0

    storage_path = storage.save(user.id, file.filename or "article.pdf", data)

    try:
        article = repo.insert(
            Article(
                user_id=user.id,
                title=title.strip(),
                full_text=full_text,
                pages=pages,
                storage_path=storage_path,
                analysis_completed=False,
            )
        )
    except Exception as e:
        logger.error(f"❌ Article insert failed, removing blob {storage_path}: {e}")
        storage.delete(storage_path)
        raise
    logger.info(f"📄 Article uploaded: {article.id} by {user.id} ({pages} pages)")

    if Config.analysis.auto_trigger:
        background_tasks.add_task(run_article_analysis_job, article.id)

    return UploadResponse(
        article=ArticleResponse.from_article(article),
        message="Article uploaded successfully. Analysis in progress...",
    )


@router.get("/api/articles", response_model=ArticleListResponse)
def list_articles(
    limit: int = Query(default=6, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
):
    """List articles with pagination, newest upload first."""
    articles = repo.list(limit=limit, offset=offset)
    return ArticleListResponse(
        data=[ArticleResponse.from_article(a) for a in articles],
        total=repo.count(),
        limit=limit,
        offset=offset,
    )


@router.get("/api/articles/mine", response_model=ArticleListResponse)
def list_my_articles(
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
):
    articles = repo.list_by_user(user.id)
    return ArticleListResponse(
        data=[ArticleResponse.from_article(a) for a in articles],
        total=len(articles),
        limit=len(articles),
        offset=0,
    )


@router.get("/api/articles/{article_id}", response_model=ArticleResponse)
def get_article(
    article_id: str,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
):
    article = repo.get_article_by_id(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleResponse.from_article(article)


@router.get("/api/articles/{article_id}/read", response_model=ArticleReadResponse)
def read_article(
    article_id: str,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
):
    """Reader payload with the extracted text. Owner only."""
    article = repo.get_article_by_id(article_id)
    if not article or article.user_id != user.id:
        raise HTTPException(status_code=404, detail="Article not found")
    return ArticleReadResponse.from_article(article)


@router.delete("/api/articles/{article_id}", response_model=SuccessResponse)
def delete_article(
    article_id: str,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    storage: ArticleStorage = Depends(get_storage),
):
    article = repo.get_article_by_id(article_id)
    if not article or not repo.delete(article_id, user_id=user.id):
        raise HTTPException(status_code=404, detail="Article not found")

    storage.delete(article.storage_path)
    logger.info(f"🗑️ Article deleted: {article_id} by {user.id}")
    return SuccessResponse(message="Article deleted")

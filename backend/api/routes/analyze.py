import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.deps import get_article_repo, get_current_user
from api.schemas.article import AnalysisData, AnalyzeRequest, AnalyzeResponse
from deepreview.database.article_repository import ArticleRepository
from deepreview.model.user import User
from deepreview.service.analysis_service import analyze_article

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analyze", tags=["analyze"])


@router.post("", response_model=AnalyzeResponse)
def analyze(
    body: AnalyzeRequest,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
):
    """Run the metadata analysis for one article synchronously."""
    if not body.article_id:
        raise HTTPException(status_code=400, detail="Article ID required")

    article = repo.get_article_by_id(body.article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    if not article.full_text:
        raise HTTPException(status_code=400, detail="No text to analyze")

    try:
        analysis = analyze_article(article, repo=repo)
    except Exception as e:
        logger.error(f"❌ Analysis error for {article.id}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Analysis failed", "details": str(e) or "Unknown error"},
        )

    logger.info(f"✅ Analysis completed for article: {article.id}")
    return AnalyzeResponse(data=AnalysisData(**analysis))

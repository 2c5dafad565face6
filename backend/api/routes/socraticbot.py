import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from api.deps import get_article_repo, get_current_user, get_progress_repo, get_socratic_service
from api.schemas.progress import ProgressListResponse, ProgressResponse
from api.schemas.socratic import (
    ActiveSessionResponse,
    CreateSessionRequest,
    SessionResponse,
    SocraticRequest,
    SocraticResponse,
)
from deepreview.database.article_repository import ArticleRepository
from deepreview.database.progress_repository import ProgressRepository
from deepreview.model.user import User
from deepreview.service.llm_service import LLMRateLimitError
from deepreview.service.socratic_service import SocraticFlowError, SocraticService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/socraticbot", tags=["socraticbot"])


@router.post("/sessions", response_model=SessionResponse)
def create_session(
    body: CreateSessionRequest,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    socratic: SocraticService = Depends(get_socratic_service),
):
    """Start a new Socratic session for an article."""
    if not body.article_id:
        raise HTTPException(status_code=400, detail="Missing articleId")
    if not repo.get_article_by_id(body.article_id):
        raise HTTPException(status_code=404, detail="Article not found")

    session = socratic.create_session(body.article_id, user.id)
    logger.info(f"🧠 Socratic session created: {session.id} (article {body.article_id})")
    return SessionResponse.from_session(session)


@router.get("/sessions/active", response_model=ActiveSessionResponse)
def get_active_session(
    article_id: Optional[str] = Query(default=None, alias="articleId"),
    user: User = Depends(get_current_user),
    socratic: SocraticService = Depends(get_socratic_service),
):
    """Newest unfinished session of the caller on this article, if any."""
    if not article_id:
        raise HTTPException(status_code=400, detail="Missing articleId")

    session = socratic.get_active_session(article_id, user.id)
    return ActiveSessionResponse(
        session=SessionResponse.from_session(session) if session else None
    )


@router.post("", response_model=SocraticResponse)
def socratic_step(
    body: SocraticRequest,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    socratic: SocraticService = Depends(get_socratic_service),
):
    """
    One step of a session: without userAnswer returns the pending question,
    with userAnswer grades it and returns the next question (or the final
    evaluation after the last answer).
    """
    if not body.article_id or not body.session_id:
        raise HTTPException(status_code=400, detail="Missing articleId or sessionId")

    article = repo.get_article_by_id(body.article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")

    session = socratic.sessions.get_session(body.session_id, user.id)
    if not session or session.article_id != article.id:
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        turn = socratic.step(
            article,
            session,
            user_answer=body.user_answer,
            current_question=body.current_question,
        )
    except SocraticFlowError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMRateLimitError:
        raise
    except Exception as e:
        logger.error(f"❌ Socratic bot error for session {session.id}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process request", "details": str(e) or "Unknown error"},
        )

    return SocraticResponse.from_turn(turn)


@router.get("/progress/{article_id}", response_model=ProgressListResponse)
def get_progress(
    article_id: str,
    user: User = Depends(get_current_user),
    progress: ProgressRepository = Depends(get_progress_repo),
):
    """The caller's completed-session results on this article, newest first."""
    rows = progress.list_for_user(user.id, article_id)
    return ProgressListResponse(progress=[ProgressResponse.from_progress(p) for p in rows])

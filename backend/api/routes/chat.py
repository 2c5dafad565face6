import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.deps import get_article_repo, get_chat_service, get_current_user
from api.schemas.chat import (
    ChatHistoryResponse,
    ChatMessage,
    ChatMetadata,
    ChatRequest,
    ChatResponse,
    ClearHistoryResponse,
)
from deepreview.config import Config
from deepreview.database.article_repository import ArticleRepository
from deepreview.model.user import User
from deepreview.service.chat_service import ChatService
from deepreview.service.llm_service import is_rate_limit_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _friendly_message(exc: Exception) -> str:
    if is_rate_limit_error(exc):
        return "⏳ The service is busy right now. Please try again in a moment."
    msg = str(exc).lower()
    if "invalid" in msg or "bad request" in msg:
        return "⚠️ Invalid request. Please rephrase your question."
    return "❌ Something went wrong while processing your request."


@router.post("", response_model=ChatResponse)
def send_message(
    body: ChatRequest,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Ask a question about an article and get the AI reply."""
    if not body.article_id or not body.message or not body.message.strip():
        raise HTTPException(status_code=400, detail="Missing articleId or message")

    article = repo.get_article_by_id(body.article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")

    history = [entry.model_dump() for entry in body.chat_history]
    try:
        reply = chat_service.ask(article, user.id, body.message.strip(), history)
    except Exception as e:
        logger.error(f"❌ Chat API error: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to process chat",
                "details": str(e) or "Unknown error",
                "userFriendlyMessage": _friendly_message(e),
            },
        )

    return ChatResponse(
        message=reply,
        metadata=ChatMetadata(model=Config.llm.chat_model, timestamp=datetime.utcnow()),
    )


@router.get("/{article_id}/history", response_model=ChatHistoryResponse)
def get_chat_history(
    article_id: str,
    user: User = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repo),
    chat_service: ChatService = Depends(get_chat_service),
):
    """The caller's messages on this article, oldest first."""
    if not repo.get_article_by_id(article_id):
        raise HTTPException(status_code=404, detail="Article not found")

    messages = chat_service.get_history(article_id, user.id)
    return ChatHistoryResponse(
        article_id=article_id,
        messages=[ChatMessage.from_message(m) for m in messages],
    )


@router.delete("/{article_id}/history", response_model=ClearHistoryResponse)
def clear_chat_history(
    article_id: str,
    user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service),
):
    deleted = chat_service.clear_history(article_id, user.id)
    return ClearHistoryResponse(deleted=deleted)

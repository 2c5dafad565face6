from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from api.schemas.common import CamelModel
from deepreview.model.chat import Message


class ChatHistoryEntry(CamelModel):
    role: str = "user"  # user | assistant
    content: str = ""


class ChatRequest(CamelModel):
    article_id: Optional[str] = None
    message: Optional[str] = None
    chat_history: List[ChatHistoryEntry] = []


class ChatMetadata(CamelModel):
    model: str
    timestamp: datetime


class ChatResponse(CamelModel):
    success: bool = True
    message: str
    metadata: ChatMetadata


class ChatMessage(CamelModel):
    id: Optional[int] = None
    role: str
    content: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> ChatMessage:
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            created_at=message.created_at,
        )


class ChatHistoryResponse(CamelModel):
    article_id: str
    messages: List[ChatMessage]


class ClearHistoryResponse(CamelModel):
    success: bool = True
    deleted: int

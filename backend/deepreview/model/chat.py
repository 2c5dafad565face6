# deepreview/model/chat.py

from typing import Literal, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class Message(BaseModel):
    """Chat log entry for one article and one user."""
    id: Optional[int] = None
    article_id: str
    user_id: str
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
import uuid


class Article(BaseModel):
    """
    Uploaded academic article.

    The analysis job fills authors / abstract / keywords / main_topics /
    publication_year and flips analysis_completed.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str

    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: Optional[str] = None
    full_text: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)
    main_topics: List[str] = Field(default_factory=list)
    pages: Optional[int] = None
    publication_year: Optional[int] = None
    storage_path: Optional[str] = None
    analysis_completed: bool = False

    created_at: datetime = Field(default_factory=datetime.utcnow)
    uploaded_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
        "extra": "ignore",
    }

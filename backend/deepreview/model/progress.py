from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class StudentProgress(BaseModel):
    """Decoded student_progress row (JSON text columns already parsed)."""
    id: Optional[int] = None

    user_id: str
    article_id: str
    session_id: Optional[str] = None

    final_average_score: Optional[float] = None

    question_scores: List[float] = Field(default_factory=list)
    difficulty_path: List[int] = Field(default_factory=list)

    comprehension_score: Optional[int] = None
    critical_thinking_score: Optional[int] = None
    quality_score: Optional[int] = None

    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # joined article info, filled for instructor views
    article_title: Optional[str] = None
    article_authors: Optional[List[str]] = None

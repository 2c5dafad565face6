"""
Socratic session models

A session walks through a fixed number of adaptive questions. Answer records
are persisted with camelCase keys ({"answer", "score", "isCorrect",
"difficulty"}) inside the session row.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid


class AnswerRecord(BaseModel):
    answer: str
    score: int = 0
    is_correct: bool = Field(default=False, alias="isCorrect")
    difficulty: int = 0

    model_config = ConfigDict(populate_by_name=True)


class Grading(BaseModel):
    """Normalized grader output for a single answer."""
    is_correct: bool
    score: int
    feedback: str = ""


class FinalEvaluation(BaseModel):
    comprehension_score: int
    critical_thinking_score: int
    quality_score: int
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    summary_text: str = "Summary not available."
    is_fallback: bool = False


class SessionSummary(BaseModel):
    """Finalized numbers for a completed session plus the evaluator's verdict."""
    average_score: float
    scores: List[int]
    difficulty_path: List[int]
    evaluation: FinalEvaluation


class SocraticTurn(BaseModel):
    """What one step of the workflow hands back to the client."""
    question: Optional[str] = None
    level: int
    question_index: int
    is_completed: bool = False
    feedback: Optional[str] = None
    answer_score: Optional[int] = None
    is_correct: Optional[bool] = None
    average_score: Optional[float] = None
    summary: Optional[SessionSummary] = None


class SocraticSession(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    article_id: str
    user_id: str

    questions_asked: List[str] = Field(default_factory=list)
    questions_answered: List[AnswerRecord] = Field(default_factory=list)

    current_level: int = 3
    is_completed: bool = False

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def questions_asked_count(self) -> int:
        return len(self.questions_asked)

    @property
    def questions_answered_count(self) -> int:
        return len(self.questions_answered)

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from api.schemas.common import CamelModel
from deepreview.model.socratic import SessionSummary, SocraticSession, SocraticTurn


class CreateSessionRequest(CamelModel):
    article_id: Optional[str] = None


class AnswerRecordResponse(CamelModel):
    answer: str
    score: int
    is_correct: bool
    difficulty: int


class SessionResponse(CamelModel):
    id: str
    article_id: str
    questions_asked: List[str]
    questions_answered: List[AnswerRecordResponse]
    questions_asked_count: int
    questions_answered_count: int
    current_level: int
    is_completed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_session(cls, session: SocraticSession) -> SessionResponse:
        return cls(
            id=session.id,
            article_id=session.article_id,
            questions_asked=session.questions_asked,
            questions_answered=[
                AnswerRecordResponse(
                    answer=a.answer,
                    score=a.score,
                    is_correct=a.is_correct,
                    difficulty=a.difficulty,
                )
                for a in session.questions_answered
            ],
            questions_asked_count=session.questions_asked_count,
            questions_answered_count=session.questions_answered_count,
            current_level=session.current_level,
            is_completed=session.is_completed,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class SocraticRequest(CamelModel):
    article_id: Optional[str] = None
    session_id: Optional[str] = None
    user_answer: Optional[str] = None
    current_question: Optional[str] = None
    # accepted for client compatibility; the persisted level is authoritative
    current_level: Optional[int] = None


class FinalFeedback(CamelModel):
    average_score: float
    scores: List[int]
    difficulty_path: List[int]
    comprehension_score: int
    critical_thinking_score: int
    quality_score: int
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[str]
    summary_text: str
    is_fallback: bool

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> FinalFeedback:
        evaluation = summary.evaluation
        return cls(
            average_score=summary.average_score,
            scores=summary.scores,
            difficulty_path=summary.difficulty_path,
            comprehension_score=evaluation.comprehension_score,
            critical_thinking_score=evaluation.critical_thinking_score,
            quality_score=evaluation.quality_score,
            strengths=evaluation.strengths,
            weaknesses=evaluation.weaknesses,
            recommendations=evaluation.recommendations,
            summary_text=evaluation.summary_text,
            is_fallback=evaluation.is_fallback,
        )


class SocraticResponse(CamelModel):
    question: Optional[str] = None
    level: int
    question_index: int
    is_completed: bool
    # short grader feedback mid-session, the final evaluation once completed
    feedback: Union[FinalFeedback, str, None] = None
    answer_score: Optional[int] = None
    is_correct: Optional[bool] = None
    average_score: Optional[float] = None

    @classmethod
    def from_turn(cls, turn: SocraticTurn) -> SocraticResponse:
        feedback: Union[FinalFeedback, str, None] = turn.feedback
        if turn.summary is not None:
            feedback = FinalFeedback.from_summary(turn.summary)
        return cls(
            question=turn.question,
            level=turn.level,
            question_index=turn.question_index,
            is_completed=turn.is_completed,
            feedback=feedback,
            answer_score=turn.answer_score,
            is_correct=turn.is_correct,
            average_score=turn.average_score,
        )


class ActiveSessionResponse(CamelModel):
    session: Optional[SessionResponse] = None

from .user import User, Role
from .article import Article
from .chat import Message
from .socratic import (
    AnswerRecord,
    Grading,
    FinalEvaluation,
    SessionSummary,
    SocraticTurn,
    SocraticSession,
)
from .progress import StudentProgress

__all__ = [
    "User",
    "Role",
    "Article",
    "Message",
    "AnswerRecord",
    "Grading",
    "FinalEvaluation",
    "SessionSummary",
    "SocraticTurn",
    "SocraticSession",
    "StudentProgress",
]

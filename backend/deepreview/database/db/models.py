from sqlalchemy import (
    Column,
    Text,
    DateTime,
    Boolean,
    Float,
    ForeignKey,
    Integer,
    JSON,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime


Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite)
JsonList = JSON().with_variant(JSONB(), "postgresql")


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)  # UUID
    email = Column(Text, nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="student")  # student | instructor

    password_hash = Column(Text, nullable=False)
    password_salt = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    articles = relationship("ArticleRow", back_populates="owner", cascade="all, delete-orphan")
    tokens = relationship("AuthTokenRow", cascade="all, delete-orphan")
    messages = relationship("MessageRow", cascade="all, delete-orphan")
    sessions = relationship("SocraticSessionRow", cascade="all, delete-orphan")
    progress = relationship("StudentProgressRow", back_populates="user", cascade="all, delete-orphan")


class AuthTokenRow(Base):
    """Bearer token issued at sign-in."""
    __tablename__ = "auth_tokens"

    token = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)


class ArticleRow(Base):
    __tablename__ = "articles"

    id = Column(Text, primary_key=True)  # UUID
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(Text, nullable=False)
    authors = Column(JsonList, default=list)
    abstract = Column(Text, nullable=True)
    full_text = Column(Text, nullable=True)
    keywords = Column(JsonList, default=list)
    main_topics = Column(JsonList, default=list)
    pages = Column(Integer, nullable=True)
    publication_year = Column(Integer, nullable=True)
    storage_path = Column(Text, nullable=True)  # relative to Config.storage_path
    analysis_completed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    owner = relationship("UserRow", back_populates="articles")
    messages = relationship("MessageRow", cascade="all, delete-orphan")
    sessions = relationship("SocraticSessionRow", cascade="all, delete-orphan")
    progress = relationship("StudentProgressRow", back_populates="article", cascade="all, delete-orphan")


class MessageRow(Base):
    """Chat log entry"""
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Text, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    role = Column(Text, nullable=False)  # user | assistant
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)


class SocraticSessionRow(Base):
    __tablename__ = "socratic_sessions"

    id = Column(Text, primary_key=True)  # UUID
    article_id = Column(Text, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # ["q1", "q2", ...]
    questions_asked = Column(JsonList, default=list)
    # [{"answer", "score", "isCorrect", "difficulty"}, ...]
    questions_answered = Column(JsonList, default=list)
    questions_asked_count = Column(Integer, default=0)
    questions_answered_count = Column(Integer, default=0)

    current_level = Column(Integer, default=3)
    is_completed = Column(Boolean, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class StudentProgressRow(Base):
    """One row per completed Socratic session. Array columns hold JSON text."""
    __tablename__ = "student_progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    article_id = Column(Text, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    session_id = Column(Text, ForeignKey("socratic_sessions.id", ondelete="SET NULL"), nullable=True)

    final_average_score = Column(Float, nullable=True)

    question_scores = Column(Text, default="[]")
    difficulty_path = Column(Text, default="[]")

    comprehension_score = Column(Integer, nullable=True)
    critical_thinking_score = Column(Integer, nullable=True)
    quality_score = Column(Integer, nullable=True)

    strengths = Column(Text, default="[]")
    weaknesses = Column(Text, default="[]")
    recommendations = Column(Text, default="[]")

    created_at = Column(DateTime, default=datetime.utcnow)

    article = relationship("ArticleRow", back_populates="progress")
    user = relationship("UserRow", back_populates="progress")

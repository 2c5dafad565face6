# deepreview/service/socratic_service.py

"""
Socratic Service - five-question adaptive quiz over one article

Flow per session:
    AwaitingFirstQuestion -> AwaitingAnswer(1) -> ... -> AwaitingAnswer(5) -> Completed

- the first question is asked at the start level (3 of 1-5)
- each answer is graded by the LLM; an incorrect answer always scores 0
- the level moves one step up on a correct answer and one step down otherwise,
  clamped to 1-5
- after the last answer the scores are finalized, the LLM writes an overall
  evaluation (hardcoded fallback on any failure) and a progress row is stored
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, List, Optional

from deepreview.config import Config
from deepreview.database.progress_repository import ProgressRepository
from deepreview.database.socratic_repository import SocraticRepository
from deepreview.model.article import Article
from deepreview.model.progress import StudentProgress
from deepreview.model.socratic import (
    AnswerRecord,
    FinalEvaluation,
    Grading,
    SessionSummary,
    SocraticSession,
    SocraticTurn,
)
from deepreview.service.llm_service import generate_with_retry, parse_json_response

logger = logging.getLogger(__name__)


GRADING_FALLBACK_FEEDBACK = "Could not evaluate reliably. Please be more specific and reference the article."


class SocraticFlowError(ValueError):
    """The request does not fit the session's current state."""


def fallback_evaluation() -> FinalEvaluation:
    return FinalEvaluation(
        comprehension_score=70,
        critical_thinking_score=68,
        quality_score=72,
        strengths=["Completed the Socratic flow"],
        weaknesses=["Some answers need more evidence"],
        recommendations=["Add concrete examples from the article"],
        summary_text="Feedback generation failed due to temporary limits. Try again later.",
        is_fallback=True,
    )


# =========================================================
# Pure helpers
# =========================================================

def clamp_level(level: Any, low: Optional[int] = None, high: Optional[int] = None) -> int:
    low = Config.socratic.min_level if low is None else low
    high = Config.socratic.max_level if high is None else high
    try:
        value = int(level)
    except (TypeError, ValueError):
        value = Config.socratic.start_level
    return max(low, min(high, value))


def next_level(current: int, is_correct: bool) -> int:
    return clamp_level(current + 1 if is_correct else current - 1)


def to_score(value: Any) -> int:
    """Any number-ish value as an integer in 0-100 (0 when not a number)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, min(100, int(round(number))))


def normalize_grading(data: dict) -> Grading:
    is_correct = str(data.get("isCorrect")).strip().lower() == "true"
    score = to_score(data.get("score")) if is_correct else 0
    feedback = data.get("feedback")
    return Grading(
        is_correct=is_correct,
        score=score,
        feedback=feedback if isinstance(feedback, str) else "",
    )


def parse_grading(text: str) -> Grading:
    try:
        return normalize_grading(parse_json_response(text))
    except ValueError:
        logger.warning(f"Unparsable grading output: {text[:200]!r}")
        return Grading(is_correct=False, score=0, feedback=GRADING_FALLBACK_FEEDBACK)


def pad_to_length(values: Iterable[Any], length: Optional[int] = None, fill: int = 0) -> List[int]:
    """First `length` values as ints, zero-padded."""
    length = length or Config.socratic.questions_per_session
    result = [to_int_or(v, fill) for v in list(values)[:length]]
    result.extend([fill] * (length - len(result)))
    return result


def to_int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def average_score(scores: List[int]) -> float:
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 2)


def summarize_answers(answers: List[AnswerRecord]) -> tuple[List[int], List[int], float]:
    """(scores, difficulty path, average) over a fixed-length window."""
    scores = pad_to_length(a.score for a in answers)
    difficulty_path = pad_to_length(a.difficulty for a in answers)
    return scores, difficulty_path, average_score(scores)


def parse_final_evaluation(text: str) -> FinalEvaluation:
    """Raises ValueError when the output is not a JSON object."""
    data = parse_json_response(text)

    def _list(key: str, limit: int) -> List[str]:
        value = data.get(key)
        return [str(v) for v in value[:limit]] if isinstance(value, list) else []

    summary = data.get("summaryText")
    return FinalEvaluation(
        comprehension_score=to_score(data.get("comprehensionScore")),
        critical_thinking_score=to_score(data.get("criticalThinkingScore")),
        quality_score=to_score(data.get("qualityScore")),
        strengths=_list("strengths", 6),
        weaknesses=_list("weaknesses", 6),
        recommendations=_list("recommendations", 8),
        summary_text=summary if isinstance(summary, str) else "Summary not available.",
        is_fallback=False,
    )


# =========================================================
# Prompts
# =========================================================

def _topics(article: Article) -> str:
    return ", ".join(article.main_topics) or "Not available"


def first_question_prompt(article: Article, level: int) -> str:
    preview = (article.full_text or "")[:Config.socratic.preview_chars] or "Not available"
    return f"""You are a Socratic teaching bot.
Generate the FIRST question for this academic article.

Difficulty Level: {level} (1=easy, 5=hard)

Title: {article.title}
Authors: {", ".join(article.authors) or "Unknown"}
Abstract: {article.abstract or "No abstract"}
Topics: {_topics(article)}
Text Preview: {preview}

Guidelines:
- Moderately challenging comprehension
- Not too basic, not too advanced
- Encourage explanation (not yes/no)

Respond ONLY with the question text."""


def next_question_prompt(article: Article, level: int, index: int, previous_answer: Optional[str]) -> str:
    total = Config.socratic.questions_per_session
    return f"""You are a Socratic teaching bot.
Generate the NEXT question (Question {index} of {total}).

Difficulty Level: {level} (1=easy, 5=hard)

Article Title: {article.title}
Topics: {_topics(article)}

Student's previous answer (for context): "{previous_answer or ""}"

Guidelines by difficulty:
- Level 1: simple comprehension
- Level 2: method/design basics
- Level 3: findings reasoning
- Level 4: implications/limitations
- Level 5: critical thinking, alternatives, future work

Respond ONLY with the question text."""


def grading_prompt(article: Article, question: str, answer: str) -> str:
    return f"""You are an educational grader.

Rules:
- Decide if the answer is correct enough to be considered "correct".
- If NOT correct => score MUST be 0.
- If correct => score 1-100 based on accuracy, completeness, and clarity.
- Keep feedback short (1-2 sentences).

Return ONLY valid JSON (no markdown):
{{
  "isCorrect": true,
  "score": 85,
  "feedback": "..."
}}

Article Title: {article.title}
Abstract: {article.abstract or "No abstract"}
Topics: {_topics(article)}

Question: {question}
Student Answer: {answer}
"""


def final_evaluation_prompt(
    article: Article,
    questions: List[str],
    answers: List[AnswerRecord],
    avg: float,
) -> str:
    total = Config.socratic.questions_per_session
    blocks = []
    for i, question in enumerate(questions[:total]):
        a = answers[i] if i < len(answers) else None
        blocks.append(
            f"Q{i + 1}: {question}\n"
            f"A{i + 1}: {a.answer if a else 'No answer'}\n"
            f"Score: {a.score if a else 0}\n"
            f"Correct: {str(a.is_correct if a else False).lower()}\n"
            f"Difficulty: {a.difficulty if a else 0}"
        )
    qa_text = "\n\n".join(blocks)

    return f"""You are an expert educational evaluator.

Analyze the student's FULL {total}-question Socratic session and return ONLY valid JSON (no markdown).

Return EXACTLY this JSON schema:
{{
  "comprehensionScore": 0,
  "criticalThinkingScore": 0,
  "qualityScore": 0,
  "strengths": ["...", "..."],
  "weaknesses": ["...", "..."],
  "recommendations": ["...", "..."],
  "summaryText": "..."
}}

Rules:
- Scores must be integers 0-100.
- Strengths/weaknesses/recommendations should be specific to the student's answers, not generic.
- summaryText: 3-4 sentences, concise.
- Use the final averageScore ({avg}/100) to calibrate tone.

Article:
Title: {article.title}
Abstract: {article.abstract or "No abstract"}
Topics: {_topics(article)}

Session Q&A:
{qa_text}
"""


# =========================================================
# Workflow
# =========================================================

class SocraticService:

    def __init__(
        self,
        sessions: Optional[SocraticRepository] = None,
        progress: Optional[ProgressRepository] = None,
    ):
        self.sessions = sessions or SocraticRepository()
        self.progress = progress or ProgressRepository()

    @property
    def total_questions(self) -> int:
        return Config.socratic.questions_per_session

    def create_session(self, article_id: str, user_id: str) -> SocraticSession:
        return self.sessions.create_session(article_id, user_id, Config.socratic.start_level)

    def get_active_session(self, article_id: str, user_id: str) -> Optional[SocraticSession]:
        return self.sessions.get_active_session(article_id, user_id)

    def step(
        self,
        article: Article,
        session: SocraticSession,
        user_answer: Optional[str] = None,
        current_question: Optional[str] = None,
    ) -> SocraticTurn:
        """
        Advance the session by one request.

        Without an answer the pending question is returned (generated first if
        needed); with an answer the pending question is graded. An answer sent
        while no question is pending after the first is not graded again.

        Raises:
            SocraticFlowError: completed session, or an answer with no question
            LLMRateLimitError: the provider kept rate-limiting us
        """
        if session.is_completed:
            raise SocraticFlowError("Session already completed")

        if user_answer is None or not str(user_answer).strip():
            return self._pending_question(article, session)
        return self._answer(article, session, str(user_answer), current_question)

    # -----------------------------------------------------

    def _pending_question(self, article: Article, session: SocraticSession) -> SocraticTurn:
        answered = session.questions_answered_count

        if session.questions_asked_count > answered:
            question = session.questions_asked[answered]
        else:
            if answered == 0:
                level = Config.socratic.start_level
                question = generate_with_retry(first_question_prompt(article, level))
                session.current_level = level
            else:
                # a previous next-question call failed after the answer was stored
                previous = session.questions_answered[-1].answer
                question = generate_with_retry(
                    next_question_prompt(article, session.current_level, answered + 1, previous)
                )
            session.questions_asked = session.questions_asked[:answered] + [question]
            self.sessions.save_state(session)

        return SocraticTurn(
            question=question,
            level=session.current_level,
            question_index=answered + 1,
        )

    def _answer(
        self,
        article: Article,
        session: SocraticSession,
        answer: str,
        current_question: Optional[str],
    ) -> SocraticTurn:
        index = session.questions_answered_count + 1  # 1-based

        if session.questions_asked_count >= index:
            question = session.questions_asked[index - 1]
        elif index > 1:
            # answer already recorded, only the next question is missing
            return self._pending_question(article, session)
        elif current_question and current_question.strip():
            question = current_question.strip()
        else:
            raise SocraticFlowError("Missing currentQuestion for grading")

        difficulty = clamp_level(session.current_level)
        grading = parse_grading(generate_with_retry(grading_prompt(article, question, answer)))
        new_level = next_level(difficulty, grading.is_correct)

        asked = session.questions_asked[:index - 1] + [question]
        session.questions_asked = asked + session.questions_asked[index:]
        session.questions_answered = session.questions_answered + [
            AnswerRecord(
                answer=answer,
                score=grading.score,
                is_correct=grading.is_correct,
                difficulty=difficulty,
            )
        ]
        session.current_level = new_level
        session.is_completed = session.questions_answered_count >= self.total_questions
        self.sessions.save_state(session)

        if session.is_completed:
            summary = self._finish(article, session)
            return SocraticTurn(
                question=None,
                level=new_level,
                question_index=self.total_questions + 1,
                is_completed=True,
                answer_score=grading.score,
                is_correct=grading.is_correct,
                average_score=summary.average_score,
                summary=summary,
            )

        next_index = index + 1
        next_question = generate_with_retry(
            next_question_prompt(article, new_level, next_index, answer)
        )
        if session.questions_asked_count < next_index:
            session.questions_asked = session.questions_asked + [next_question]
            self.sessions.save_state(session)

        return SocraticTurn(
            question=next_question,
            level=new_level,
            question_index=next_index,
            feedback=grading.feedback,
            answer_score=grading.score,
            is_correct=grading.is_correct,
        )

    def _finish(self, article: Article, session: SocraticSession) -> SessionSummary:
        scores, difficulty_path, avg = summarize_answers(session.questions_answered)

        try:
            evaluation = parse_final_evaluation(
                generate_with_retry(
                    final_evaluation_prompt(
                        article, session.questions_asked, session.questions_answered, avg
                    )
                )
            )
        except Exception as e:
            logger.warning(f"⚠️ Final evaluation failed for session {session.id}, using fallback: {e}")
            evaluation = fallback_evaluation()

        try:
            self.progress.insert(
                StudentProgress(
                    user_id=session.user_id,
                    article_id=session.article_id,
                    session_id=session.id,
                    final_average_score=avg,
                    question_scores=scores,
                    difficulty_path=difficulty_path,
                    comprehension_score=evaluation.comprehension_score,
                    critical_thinking_score=evaluation.critical_thinking_score,
                    quality_score=evaluation.quality_score,
                    strengths=evaluation.strengths,
                    weaknesses=evaluation.weaknesses,
                    recommendations=evaluation.recommendations,
                )
            )
        except Exception as e:
            logger.error(f"❌ student_progress insert failed for session {session.id}: {e}")

        logger.info(f"✅ Socratic session {session.id} completed, average {avg}")
        return SessionSummary(
            average_score=avg,
            scores=scores,
            difficulty_path=difficulty_path,
            evaluation=evaluation,
        )

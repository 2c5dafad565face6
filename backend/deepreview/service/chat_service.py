# deepreview/service/chat_service.py

"""
Chat Service - article Q&A

- build the article-grounded system prompt
- send the question with the recent history to the LLM
- append the question and the reply to the message log
"""

from typing import Dict, List, Optional, Sequence
import logging

from deepreview.config import Config
from deepreview.database.message_repository import MessageRepository
from deepreview.model.article import Article
from deepreview.model.chat import Message
from deepreview.service.llm_service import llm_chat

logger = logging.getLogger(__name__)


def _joined(values: Sequence[str], fallback: str) -> str:
    return ", ".join(values) if values else fallback


def build_system_prompt(article: Article, max_chars: Optional[int] = None) -> str:
    """
    System prompt with article metadata and (truncated) full text.
    """
    max_chars = max_chars or Config.chat.max_article_chars
    full_text = article.full_text[:max_chars] if article.full_text else "No full text available"

    return f"""🎓 You are an **expert academic reading assistant** helping university students deeply understand research articles.

## STRICT CONSTRAINTS
- Answer ONLY from the provided article text
- Do not supplement with knowledge beyond the article
- If information isn't in the article, say: "⚠️ This specific information is not covered in the article"
- Never invent data, citations, or details
- Explain concepts; don't quiz the student
- Questions unrelated to the article get: "⚠️ This question is outside the scope of this article"

## ARTICLE CONTEXT
**Title**: {article.title}
**Authors**: {_joined(article.authors, "Unknown")}
**Abstract**: {article.abstract or "No abstract available"}
**Keywords**: {_joined(article.keywords, "Not specified")}
**Main Topics**: {_joined(article.main_topics, "Not analyzed")}

## FULL ARTICLE TEXT (YOUR ONLY SOURCE)
{full_text}

## RESPONSE FRAMEWORK
1. Direct answer first, with a fitting emoji (🔍, 💡, 📊, 🔬)
2. Evidence: quote relevant passages, name the section, explain technical terms, **bold** key concepts
3. Context: connect the answer to the article's main argument
4. Formatting: bullet points and numbered steps, code blocks for formulas, 8-12 emojis at most

## QUALITY
- 150-400 words depending on complexity
- Use the article's exact terminology
- Professional yet friendly tone
- Never ask questions back, never say "I think"
"""


def build_messages(
    article: Article,
    question: str,
    history: List[Dict[str, str]],
    history_limit: Optional[int] = None,
) -> List[Dict[str, str]]:
    """
    System prompt + last `history_limit` turns + the new question.
    """
    history_limit = history_limit or Config.chat.history_limit
    recent = history[-history_limit:] if history_limit > 0 else []

    messages = [{"role": "system", "content": build_system_prompt(article)}]
    for entry in recent:
        content = str(entry.get("content") or "")
        if not content:
            continue
        role = "assistant" if entry.get("role") == "assistant" else "user"
        messages.append({"role": role, "content": content})

    if len(messages) == 1:
        question = (
            f"🎓 **First Question from Student**: {question}\n\n"
            "(Remember: Base your answer solely on the article and use engaging formatting with emojis)"
        )
    messages.append({"role": "user", "content": question})
    return messages


class ChatService:
    """Article chat"""

    def __init__(self, repo: Optional[MessageRepository] = None):
        self.repo = repo or MessageRepository()

    def ask(
        self,
        article: Article,
        user_id: str,
        question: str,
        history: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        """
        Ask a question about the article.

        LLM errors propagate; nothing is logged to the history on failure.
        """
        messages = build_messages(article, question, history or [])
        answer = llm_chat(messages)

        self.repo.add_message(article.id, user_id, "user", question)
        self.repo.add_message(article.id, user_id, "assistant", answer)

        logger.info(
            f"✅ [Chat] Article: {article.title!r} | Q: {question[:50]}... | Response: {len(answer)} chars"
        )
        return answer

    def get_history(self, article_id: str, user_id: str) -> List[Message]:
        return self.repo.get_messages(article_id, user_id)

    def clear_history(self, article_id: str, user_id: str) -> int:
        return self.repo.clear(article_id, user_id)

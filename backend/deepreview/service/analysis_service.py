"""
Article analysis - one-shot LLM metadata extraction.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..config import Config
from ..database.article_repository import ArticleRepository
from ..model.article import Article
from .llm_service import llm_completion, parse_json_response

logger = logging.getLogger(__name__)


def build_analysis_prompt(full_text: str, max_chars: Optional[int] = None) -> str:
    max_chars = max_chars or Config.analysis.max_text_chars
    return f"""
Analyze the following academic article and extract key information in JSON format.

Article Text:
{full_text[:max_chars]}

Please provide a JSON response with the following structure (ONLY JSON, no markdown):
{{
  "title": "Extracted or corrected article title",
  "authors": ["Author 1", "Author 2"],
  "abstract": "Article abstract or summary",
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "publication_year": 2024,
  "main_topics": ["topic1", "topic2", "topic3"]
}}

If you cannot extract certain information, use null for that field.
""".strip()


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _year(value: Any) -> Optional[int]:
    try:
        year = int(value)
    except (TypeError, ValueError):
        return None
    return year if 0 < year < 10000 else None


def parse_analysis(text: str, article: Article) -> Dict[str, Any]:
    """
    Turn model output into the analysis payload.

    Unparsable output yields an empty analysis that keeps the current title.
    """
    try:
        data = parse_json_response(text)
    except ValueError:
        logger.error(f"Failed to parse analysis response for {article.id}: {text[:200]!r}")
        data = {}

    title = data.get("title")
    abstract = data.get("abstract")
    return {
        "title": title.strip() if isinstance(title, str) and title.strip() else article.title,
        "authors": _str_list(data.get("authors")),
        "abstract": abstract if isinstance(abstract, str) and abstract.strip() else None,
        "keywords": _str_list(data.get("keywords")),
        "publication_year": _year(data.get("publication_year")),
        "main_topics": _str_list(data.get("main_topics")),
    }


def analyze_article(article: Article, repo: Optional[ArticleRepository] = None) -> Dict[str, Any]:
    """
    Run the analysis for an article that has text and store the result.

    Returns the analysis payload. LLM errors propagate to the caller.
    """
    if not article.full_text:
        raise ValueError("No text to analyze")

    repo = repo or ArticleRepository()

    text = llm_completion(build_analysis_prompt(article.full_text))
    analysis = parse_analysis(text, article)

    repo.update_fields(
        article.id,
        analysis_completed=True,
        **analysis,
    )
    return analysis

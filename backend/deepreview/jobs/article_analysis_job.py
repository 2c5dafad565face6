# deepreview/jobs/article_analysis_job.py

"""
Article Analysis Job - background metadata extraction for one article

Triggered:
- right after an upload (FastAPI BackgroundTasks, not awaited)
- manually from the CLI
"""

import logging

from deepreview.database.article_repository import ArticleRepository
from deepreview.service.analysis_service import analyze_article

logger = logging.getLogger(__name__)


def run_article_analysis_job(article_id: str) -> bool:
    """
    Best-effort analysis entry point.

    Failures are logged and reported as False, never raised: the upload that
    scheduled this job has already answered the client.
    """
    logger.info(f"🚀 Starting analysis job for article: {article_id}")

    repo = ArticleRepository()
    article = repo.get_article_by_id(article_id)

    if not article:
        logger.error(f"❌ Article not found: {article_id}")
        return False

    if not article.full_text:
        logger.warning(f"⚠️ Article {article_id} has no text, skipping analysis")
        return False

    try:
        analysis = analyze_article(article, repo=repo)
    except Exception as e:
        logger.error(f"❌ Analysis job failed for {article_id}: {e}")
        return False

    logger.info(
        f"✅ Analysis job completed for article: {article_id} "
        f"({len(analysis['keywords'])} keywords, {len(analysis['main_topics'])} topics)"
    )
    return True


if __name__ == "__main__":
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if len(sys.argv) < 2:
        print("Usage: python -m deepreview.jobs.article_analysis_job <article_id>")
        sys.exit(1)

    ok = run_article_analysis_job(sys.argv[1])
    sys.exit(0 if ok else 1)

import json

from deepreview.database.article_repository import ArticleRepository
from deepreview.jobs.article_analysis_job import run_article_analysis_job
from deepreview.model.article import Article
from deepreview.service.analysis_service import build_analysis_prompt, parse_analysis

ANALYSIS = {
    "title": "Attention Is All You Need",
    "authors": ["Ashish Vaswani", "Noam Shazeer", None],
    "abstract": "The dominant sequence transduction models...",
    "keywords": ["transformer", "attention"],
    "publication_year": "2017",
    "main_topics": ["NLP"],
}


def test_prompt_truncates_text():
    prompt = build_analysis_prompt("a" * 200, max_chars=50)
    assert "a" * 50 in prompt
    assert "a" * 51 not in prompt


def test_parse_analysis_reads_fenced_json():
    article = Article(user_id="u1", title="upload.pdf")
    result = parse_analysis(f"```json\n{json.dumps(ANALYSIS)}\n```", article)

    assert result["title"] == "Attention Is All You Need"
    assert result["authors"] == ["Ashish Vaswani", "Noam Shazeer"]
    assert result["publication_year"] == 2017
    assert result["main_topics"] == ["NLP"]


def test_parse_analysis_falls_back_to_current_title():
    article = Article(user_id="u1", title="My upload")
    result = parse_analysis("Sorry, I cannot help with that.", article)

    assert result == {
        "title": "My upload",
        "authors": [],
        "abstract": None,
        "keywords": [],
        "publication_year": None,
        "main_topics": [],
    }


def test_analyze_endpoint_updates_article(client, student, article, fake_llm):
    fake_llm.queue(json.dumps(ANALYSIS))

    resp = client.post("/api/analyze", json={"articleId": article.id}, headers=student.headers)

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Analysis completed"
    assert body["data"]["publicationYear"] == 2017

    stored = ArticleRepository().get_article_by_id(article.id)
    assert stored.analysis_completed is True
    assert stored.keywords == ["transformer", "attention"]
    assert stored.abstract.startswith("The dominant")


def test_analyze_endpoint_guards(client, student, fake_llm):
    assert client.post("/api/analyze", json={}, headers=student.headers).status_code == 400
    assert client.post("/api/analyze", json={"articleId": "missing"}, headers=student.headers).status_code == 404

    empty = ArticleRepository().insert(Article(user_id=student.user.id, title="Empty", full_text=""))
    resp = client.post("/api/analyze", json={"articleId": empty.id}, headers=student.headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "No text to analyze"
    assert fake_llm.calls == []


def test_analyze_endpoint_reports_llm_failure(client, student, article, fake_llm):
    fake_llm.queue(RuntimeError("model unavailable"))

    resp = client.post("/api/analyze", json={"articleId": article.id}, headers=student.headers)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Analysis failed", "details": "model unavailable"}


def test_job_runs_analysis(article, fake_llm):
    fake_llm.queue(json.dumps(ANALYSIS))

    assert run_article_analysis_job(article.id) is True
    assert ArticleRepository().get_article_by_id(article.id).analysis_completed is True


def test_job_never_raises(article, fake_llm):
    fake_llm.queue(RuntimeError("boom"))

    assert run_article_analysis_job(article.id) is False
    assert run_article_analysis_job("does-not-exist") is False
    assert ArticleRepository().get_article_by_id(article.id).analysis_completed is False

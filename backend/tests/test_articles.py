from pathlib import Path

import pytest

from conftest import make_pdf_bytes
from deepreview.config import Config
from deepreview.database.article_repository import ArticleRepository
from deepreview.model.article import Article
from deepreview.service.pdf_parser_service import extract_pdf_text, sanitize_text_for_postgres
from deepreview.service.storage_service import ArticleStorage


def _upload(client, headers, data=None, title="My Paper", filename="paper.pdf", content_type="application/pdf"):
    files = {"file": (filename, data if data is not None else make_pdf_bytes(2), content_type)}
    return client.post("/api/upload", files=files, data={"title": title}, headers=headers)


def test_sanitize_drops_control_characters():
    assert sanitize_text_for_postgres("a\u0000b\x07c\td\ne") == "abc\td\ne"


def test_extract_pdf_text_counts_pages():
    text, pages = extract_pdf_text(make_pdf_bytes(3))
    assert pages == 3
    assert text.strip() == ""


def test_storage_layout(tmp_path):
    storage = ArticleStorage(base_path=str(tmp_path))
    relative = storage.save("user-1", "../weird name?.pdf", b"%PDF")

    assert relative.startswith("user-1/")
    assert relative.endswith("_weird_name_.pdf")
    assert storage.resolve(relative).read_bytes() == b"%PDF"
    assert storage.delete(relative) is True
    assert storage.delete(relative) is False


def test_upload_stores_article_and_blob(client, student):
    resp = _upload(client, student.headers, title="  Residual Networks  ")

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Article uploaded successfully. Analysis in progress..."
    article = body["article"]
    assert article["title"] == "Residual Networks"
    assert article["pages"] == 2
    assert article["analysisCompleted"] is False

    stored = ArticleRepository().get_article_by_id(article["id"])
    assert stored.user_id == student.user.id
    blob = Path(Config.storage_path) / stored.storage_path
    assert blob.exists()
    assert stored.storage_path.startswith(f"{student.user.id}/")


def test_upload_with_unreadable_pdf(client, student):
    resp = _upload(client, student.headers, data=b"definitely not a pdf")

    assert resp.status_code == 200
    stored = ArticleRepository().get_article_by_id(resp.json()["article"]["id"])
    assert stored.full_text == "Text extraction failed"
    assert stored.pages == 0


def test_upload_schedules_analysis(client, student, fake_llm, monkeypatch):
    monkeypatch.setattr(Config.analysis, "auto_trigger", True)
    fake_llm.queue('{"title": "Analyzed Title", "keywords": ["k"]}')

    resp = _upload(client, student.headers, data=b"broken")

    stored = ArticleRepository().get_article_by_id(resp.json()["article"]["id"])
    assert stored.analysis_completed is True
    assert stored.title == "Analyzed Title"


def test_upload_validation(client, student):
    assert _upload(client, student.headers, title="   ").status_code == 400
    resp = _upload(client, student.headers, filename="notes.txt", content_type="text/plain")
    assert resp.status_code == 400
    resp = client.post("/api/upload", data={"title": "No file"}, headers=student.headers)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing file or title"


def test_upload_requires_sign_in(client):
    assert _upload(client, {}).status_code == 401


def test_failed_insert_removes_stored_blob(client, student, monkeypatch):
    def broken_insert(self, article):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(ArticleRepository, "insert", broken_insert)

    with pytest.raises(RuntimeError, match="database unavailable"):
        _upload(client, student.headers)

    assert list(Path(Config.storage_path).rglob("*.pdf")) == []


def test_list_articles_paginates(client, student):
    repo = ArticleRepository()
    for i in range(8):
        repo.insert(Article(user_id=student.user.id, title=f"Paper {i}"))

    first = client.get("/api/articles", headers=student.headers).json()
    assert len(first["data"]) == 6
    assert first["total"] == 8

    second = client.get("/api/articles", params={"offset": 6}, headers=student.headers).json()
    assert len(second["data"]) == 2


def test_mine_and_read_are_owner_scoped(client, student, other_student, article):
    mine = client.get("/api/articles/mine", headers=student.headers).json()
    assert [a["id"] for a in mine["data"]] == [article.id]
    assert client.get("/api/articles/mine", headers=other_student.headers).json()["data"] == []

    read = client.get(f"/api/articles/{article.id}/read", headers=student.headers)
    assert read.status_code == 200
    assert read.json()["fullText"].startswith("The Transformer")
    assert client.get(f"/api/articles/{article.id}/read", headers=other_student.headers).status_code == 404

    detail = client.get(f"/api/articles/{article.id}", headers=other_student.headers).json()
    assert detail["title"] == "Attention Is All You Need"
    assert "fullText" not in detail


def test_delete_own_article(client, student, other_student, article):
    assert client.delete(f"/api/articles/{article.id}", headers=other_student.headers).status_code == 404

    resp = client.delete(f"/api/articles/{article.id}", headers=student.headers)
    assert resp.status_code == 200
    assert ArticleRepository().get_article_by_id(article.id) is None

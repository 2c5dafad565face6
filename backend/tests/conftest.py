import io
import os
import sys
import tempfile
from pathlib import Path
from types import SimpleNamespace

import pytest

_TEST_DIR = tempfile.mkdtemp(prefix="deepreview-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DIR) / 'deepreview.db'}"
os.environ["ENV"] = "test"
os.environ["AUTH__PBKDF2_ITERATIONS"] = "1000"

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from fastapi.testclient import TestClient  # noqa: E402
from pypdf import PdfWriter  # noqa: E402

from deepreview.config import Config  # noqa: E402
from deepreview.database.article_repository import ArticleRepository  # noqa: E402
from deepreview.database.db.models import Base  # noqa: E402
from deepreview.database.db.session import engine  # noqa: E402
from deepreview.database.user_repository import UserRepository  # noqa: E402
from deepreview.model.article import Article  # noqa: E402
from deepreview.service import llm_service  # noqa: E402
from deepreview.service.auth_service import hash_password  # noqa: E402

PASSWORD = "Str0ng!pass"


class FakeLLM:
    """Stands in for litellm.completion; replies are consumed in order."""

    def __init__(self):
        self.replies = []
        self.calls = []
        self.default = "Default reply"

    def queue(self, *replies):
        self.replies.extend(replies)

    def __call__(self, messages=None, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])

    @property
    def prompts(self):
        return [c["messages"][-1]["content"] for c in self.calls]


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def test_config(monkeypatch, tmp_path):
    monkeypatch.setattr(Config, "storage_path", str(tmp_path / "articles"))
    monkeypatch.setattr(Config.captcha, "enabled", False)
    monkeypatch.setattr(Config.analysis, "auto_trigger", False)
    yield


@pytest.fixture()
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(llm_service, "completion", fake)
    return fake


@pytest.fixture()
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(llm_service.time, "sleep", lambda seconds: recorded.append(seconds))
    return recorded


@pytest.fixture()
def client():
    from main import app

    with TestClient(app) as c:
        yield c


def create_user(email, role="student", full_name="Test Student", password=PASSWORD):
    pw_hash, pw_salt = hash_password(password)
    return UserRepository().create_user(email, full_name, role, pw_hash, pw_salt)


def sign_in(client, email, password=PASSWORD):
    resp = client.post("/api/auth/signin", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture()
def student(client):
    user = create_user("student@uni.edu", full_name="Sam Student")
    return SimpleNamespace(user=user, headers=sign_in(client, user.email))


@pytest.fixture()
def other_student(client):
    user = create_user("other@uni.edu", full_name="Olive Other")
    return SimpleNamespace(user=user, headers=sign_in(client, user.email))


@pytest.fixture()
def instructor(client):
    user = create_user("prof@uni.edu", role="instructor", full_name="Ida Instructor")
    return SimpleNamespace(user=user, headers=sign_in(client, user.email))


@pytest.fixture()
def article(student):
    return ArticleRepository().insert(
        Article(
            user_id=student.user.id,
            title="Attention Is All You Need",
            authors=["Ashish Vaswani", "Noam Shazeer"],
            abstract="We propose the Transformer, based solely on attention mechanisms.",
            full_text="The Transformer replaces recurrence with self-attention. " * 20,
            keywords=["attention", "transformer"],
            main_topics=["sequence modeling", "machine translation"],
            pages=11,
        )
    )


def make_pdf_bytes(pages=1):
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()

from datetime import datetime, timedelta

import pytest

from conftest import PASSWORD, create_user
from deepreview.database.article_repository import ArticleRepository
from deepreview.database.message_repository import MessageRepository
from deepreview.database.progress_repository import ProgressRepository, safe_parse_json_list
from deepreview.database.socratic_repository import SocraticRepository
from deepreview.database.user_repository import UserRepository
from deepreview.model.progress import StudentProgress
from deepreview.service.dashboard_service import rounded_mean, score_ranges


def _complete_session(user_id, article_id, score, created_at=None):
    sessions = SocraticRepository()
    session = sessions.create_session(article_id, user_id, 3)
    session.questions_asked = ["q"] * 5
    session.is_completed = True
    sessions.save_state(session)
    ProgressRepository().insert(
        StudentProgress(
            user_id=user_id,
            article_id=article_id,
            session_id=session.id,
            final_average_score=score,
            question_scores=[score] * 5,
            difficulty_path=[3, 4, 5, 5, 5],
            comprehension_score=80,
            critical_thinking_score=70,
            quality_score=75,
            strengths=["clear"],
            weaknesses=["brief"],
            recommendations=["cite more"],
            created_at=created_at or datetime.utcnow(),
        )
    )
    return session


def test_rounded_mean_rounds_half_up():
    assert rounded_mean([]) == 0
    assert rounded_mean([72, 73]) == 73
    assert rounded_mean([70.2, 70.2]) == 70


def test_score_ranges():
    assert score_ranges([95, 90, 85, 71, 60, 59.9, None]) == {
        "90-100": 2,
        "80-89": 1,
        "70-79": 1,
        "60-69": 1,
        "0-59": 2,
    }


def test_safe_parse_json_list():
    assert safe_parse_json_list('["a", "b"]') == ["a", "b"]
    assert safe_parse_json_list("{not json") == []
    assert safe_parse_json_list('{"a": 1}') == []
    assert safe_parse_json_list(None) == []


# =====================================================
# Instructor
# =====================================================

def test_instructor_routes_reject_students(client, student):
    for path in ("stats", "students", "articles", "analytics"):
        resp = client.get(f"/api/instructor/{path}", headers=student.headers)
        assert resp.status_code == 403
    assert client.get("/api/instructor/stats").status_code == 401


def test_instructor_stats(client, instructor, student, other_student, article):
    _complete_session(student.user.id, article.id, 80.0)
    _complete_session(student.user.id, article.id, 65.0)
    _complete_session(other_student.user.id, article.id, 0.0)
    SocraticRepository().create_session(article.id, student.user.id, 3)

    stats = client.get("/api/instructor/stats", headers=instructor.headers).json()

    assert stats == {
        "totalStudents": 2,
        "totalArticles": 1,
        "completedSessions": 3,
        # zero scores are left out of the average
        "averageScore": 73,
    }


def test_student_list_and_detail(client, instructor, student, other_student, article):
    _complete_session(student.user.id, article.id, 80.0)
    _complete_session(student.user.id, article.id, 65.0)

    students = client.get("/api/instructor/students", headers=instructor.headers).json()["students"]
    by_email = {s["email"]: s for s in students}
    assert set(by_email) == {"student@uni.edu", "other@uni.edu"}
    assert by_email["student@uni.edu"]["totalSessions"] == 2
    assert by_email["student@uni.edu"]["averageScore"] == 73
    assert by_email["other@uni.edu"]["totalSessions"] == 0
    assert by_email["other@uni.edu"]["averageScore"] == 0

    detail = client.get(f"/api/instructor/students/{student.user.id}", headers=instructor.headers).json()
    assert detail["student"]["email"] == "student@uni.edu"
    assert len(detail["progress"]) == 2
    assert detail["progress"][0]["articleTitle"] == "Attention Is All You Need"
    assert detail["progress"][0]["strengths"] == ["clear"]

    resp = client.get(f"/api/instructor/students/{instructor.user.id}", headers=instructor.headers)
    assert resp.status_code == 404


def test_instructor_articles_and_delete(client, instructor, student, article):
    MessageRepository().add_message(article.id, student.user.id, "user", "hi")
    _complete_session(student.user.id, article.id, 90.0)

    articles = client.get("/api/instructor/articles", headers=instructor.headers).json()["articles"]
    assert articles[0]["uploader"] == {"fullName": "Sam Student", "email": "student@uni.edu"}

    resp = client.delete(f"/api/instructor/articles/{article.id}", headers=instructor.headers)
    assert resp.status_code == 200
    assert ArticleRepository().get_article_by_id(article.id) is None
    assert MessageRepository().get_messages(article.id, student.user.id) == []
    assert ProgressRepository().list_for_user(student.user.id) == []

    resp = client.delete(f"/api/instructor/articles/{article.id}", headers=instructor.headers)
    assert resp.status_code == 404


def test_analytics(client, instructor, student, article):
    start = datetime(2025, 1, 1)
    for day, score in enumerate([50.0, 95.0, 70.0, 88.0, 61.0, 77.0]):
        _complete_session(student.user.id, article.id, score, created_at=start + timedelta(days=day))

    analytics = client.get("/api/instructor/analytics", headers=instructor.headers).json()

    assert [p["finalAverageScore"] for p in analytics["progressOverTime"]] == [50.0, 95.0, 70.0, 88.0, 61.0, 77.0]
    assert len(analytics["scoreDistribution"]) == 6
    top = analytics["topStudents"]
    assert [t["finalAverageScore"] for t in top] == [95.0, 88.0, 77.0, 70.0, 61.0]
    assert top[0]["fullName"] == "Sam Student"


# =====================================================
# Student profile
# =====================================================

def test_profile_aggregates(client, student, article, fake_llm):
    messages = MessageRepository()
    messages.add_message(article.id, student.user.id, "user", "q")
    messages.add_message(article.id, student.user.id, "assistant", "a")
    _complete_session(student.user.id, article.id, 80.0)

    profile = client.get("/api/profile", headers=student.headers).json()

    assert profile["user"]["email"] == "student@uni.edu"
    assert [a["id"] for a in profile["articles"]] == [article.id]
    assert profile["totalMessages"] == 2
    assert profile["messagesPerArticle"] == {article.id: 2}
    assert profile["totalQuestions"] == 5
    assert profile["questionsPerArticle"] == {article.id: 5}
    assert profile["progress"][0]["questionScores"] == [80.0] * 5

    latest = client.get(f"/api/profile/progress/{article.id}", headers=student.headers).json()
    assert latest["progress"]["finalAverageScore"] == 80.0
    empty = client.get("/api/profile/progress/other-article", headers=student.headers).json()
    assert empty["progress"] is None


def test_update_name(client, student):
    resp = client.patch("/api/profile", json={"fullName": "Samantha Student"}, headers=student.headers)
    assert resp.status_code == 200
    assert resp.json()["fullName"] == "Samantha Student"

    resp = client.patch("/api/profile", json={"fullName": "S"}, headers=student.headers)
    assert resp.status_code == 400


@pytest.mark.parametrize("current, status", [("Wrong!pass1", 400), (PASSWORD, 200)])
def test_change_password(client, student, current, status):
    resp = client.post(
        "/api/profile/password",
        json={"currentPassword": current, "newPassword": "N3w!password"},
        headers=student.headers,
    )
    assert resp.status_code == status

    if status == 200:
        signin = client.post(
            "/api/auth/signin",
            json={"email": "student@uni.edu", "password": "N3w!password"},
        )
        assert signin.status_code == 200
    else:
        assert resp.json()["error"] == "Current password is incorrect"


def test_delete_account_cascades(client, student, article):
    MessageRepository().add_message(article.id, student.user.id, "user", "hi")
    create_user("bystander@uni.edu")

    resp = client.delete("/api/profile", headers=student.headers)

    assert resp.status_code == 200
    assert UserRepository().get_user(student.user.id) is None
    assert ArticleRepository().get_article_by_id(article.id) is None
    assert client.get("/api/auth/me", headers=student.headers).status_code == 401
    assert UserRepository().email_exists("bystander@uni.edu")

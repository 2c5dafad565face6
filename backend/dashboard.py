# dashboard.py
"""
Instructor dashboard (Streamlit), reading straight from the repositories.

    streamlit run dashboard.py
"""

import streamlit as st

from deepreview.service.dashboard_service import SCORE_RANGES, DashboardService, score_ranges


# =====================================================
# Global singletons (cached across Streamlit reruns)
# =====================================================

@st.cache_resource
def get_dashboard() -> DashboardService:
    return DashboardService()


# =====================================================
# Sections
# =====================================================

def _render_stats(dashboard: DashboardService):
    stats = dashboard.instructor_stats()

    col_students, col_articles, col_sessions, col_avg = st.columns(4)
    col_students.metric("👥 Students", stats["total_students"])
    col_articles.metric("📄 Articles", stats["total_articles"])
    col_sessions.metric("🧠 Completed sessions", stats["completed_sessions"])
    col_avg.metric("📈 Average score", stats["average_score"])


def _render_analytics(dashboard: DashboardService):
    analytics = dashboard.analytics()

    col_time, col_dist = st.columns(2)

    with col_time:
        st.markdown("#### Progress over time")
        points = analytics["progress_over_time"]
        if points:
            st.line_chart(
                {
                    "date": [p["created_at"] for p in points],
                    "score": [p["final_average_score"] or 0 for p in points],
                },
                x="date",
                y="score",
            )
        else:
            st.caption("No completed sessions yet")

    with col_dist:
        st.markdown("#### Score distribution")
        counts = score_ranges([row["final_average_score"] for row in analytics["score_distribution"]])
        st.bar_chart(
            {"range": SCORE_RANGES, "students": [counts[r] for r in SCORE_RANGES]},
            x="range",
            y="students",
        )

    st.markdown("#### 🏆 Top results")
    top = analytics["top_students"]
    if top:
        st.table([
            {"Student": t["full_name"] or t["user_id"], "Score": t["final_average_score"]}
            for t in top
        ])
    else:
        st.caption("No results yet")


def _render_students(dashboard: DashboardService):
    students = dashboard.students()
    if not students:
        st.info("No students registered yet")
        return

    st.dataframe(
        [
            {
                "Name": s["full_name"],
                "Email": s["email"],
                "Sessions": s["total_sessions"],
                "Average": s["average_score"],
                "Joined": s["created_at"],
            }
            for s in students
        ],
        use_container_width=True,
        hide_index=True,
    )

    names = {s["id"]: f"{s['full_name']} ({s['email']})" for s in students}
    student_id = st.selectbox(
        "Student detail",
        options=list(names),
        format_func=lambda sid: names[sid],
    )
    detail = dashboard.student_detail(student_id) if student_id else None
    if not detail:
        return

    for progress in detail["progress"]:
        title = progress.article_title or progress.article_id
        with st.expander(f"{title} · {progress.final_average_score}"):
            st.write("Question scores:", progress.question_scores)
            st.write("Difficulty path:", progress.difficulty_path)
            col_c, col_t, col_q = st.columns(3)
            col_c.metric("Comprehension", progress.comprehension_score)
            col_t.metric("Critical thinking", progress.critical_thinking_score)
            col_q.metric("Quality", progress.quality_score)
            st.markdown("**Strengths**: " + "; ".join(progress.strengths))
            st.markdown("**Weaknesses**: " + "; ".join(progress.weaknesses))
            st.markdown("**Recommendations**: " + "; ".join(progress.recommendations))


# =====================================================
# Main UI
# =====================================================

def main():
    st.set_page_config(
        page_title="DeepReview – Instructor",
        layout="wide",
    )

    st.title("📚 DeepReview · Instructor Dashboard")

    dashboard = get_dashboard()

    _render_stats(dashboard)
    st.divider()

    tab_analytics, tab_students = st.tabs(["📊 Analytics", "👥 Students"])
    with tab_analytics:
        _render_analytics(dashboard)
    with tab_students:
        _render_students(dashboard)


if __name__ == "__main__":
    main()

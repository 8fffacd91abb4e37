"""Dashboard and per-entity analytics."""

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import text

from app.db.postgres import run_in_transaction
from app.services import analytics_service
from app.services.analytics_service import trailing_months


class TestTrailingMonths:
    def test_twelve_months_oldest_first(self):
        months = trailing_months(date(2024, 3, 15))
        assert len(months) == 12
        assert months[0] == "2023-04"
        assert months[-1] == "2024-03"

    def test_year_boundary(self):
        assert trailing_months(date(2024, 1, 1), 3) == ["2023-11", "2023-12", "2024-01"]


class TestDashboard:
    def test_dashboard_widgets(self, client, auth_headers, make_student, make_job, make_skill, apply):
        python_id = make_skill("Python")
        student_id = make_student()
        client.post("/api/student-skills", json={"student_id": student_id, "skill_id": python_id},
                    headers=auth_headers)
        apply(student_id, make_job(required_skill_ids=[python_id]))
        make_student()

        response = client.get("/api/analytics/dashboard")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["errors"] == {}

        overview = data["overview"]
        assert overview["total_students"] == 2
        assert overview["available_students"] == 1
        assert overview["active_jobs"] == 1
        assert overview["total_applications"] == 1

        assert len(data["trends"]) == 12
        assert data["trends"][-1]["month"] == date.today().strftime("%Y-%m")
        assert data["trends"][-1]["applications"] == 1
        assert sum(month["applications"] for month in data["trends"][:-1]) == 0

        assert data["top_skills"][0]["skill_name"] == "Python"
        assert data["top_skills"][0]["supply_demand_ratio"] == 100.0
        assert data["geographic"][0]["city"] == "Bengaluru"

    def test_failing_widget_does_not_break_the_rest(self, client, make_student, monkeypatch):
        make_student()

        def broken(db):
            raise RuntimeError("aggregate timed out")

        monkeypatch.setitem(analytics_service.DASHBOARD_WIDGETS, "geographic", broken)
        response = client.get("/api/analytics/dashboard")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["geographic"] is None
        assert data["errors"] == {"geographic": "Widget data unavailable"}
        assert data["overview"]["total_students"] == 1
        assert len(data["trends"]) == 12


class TestEntityAnalytics:
    def test_student_dashboard(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        first = apply(student_id, make_job())
        apply(student_id, make_job())
        client.put(f"/api/applications/{first}/status", json={"status": "Rejected"}, headers=auth_headers)

        data = client.get(f"/api/analytics/students/{student_id}").json()["data"]
        assert data["total_applications"] == 2
        assert data["applications_by_status"] == {"Pending": 1, "Rejected": 1}
        assert data["selection_rate"] == 0.0
        assert data["total_interviews"] == 0
        assert data["average_interview_score"] is None

    def test_company_dashboard(self, client, make_company, make_job, make_student, apply):
        company_id = make_company()
        job_id = make_job(company_id=company_id)
        apply(make_student(), job_id)
        apply(make_student(), job_id)

        data = client.get(f"/api/analytics/companies/{company_id}").json()["data"]
        assert data["total_jobs"] == 1
        assert data["total_applications"] == 2
        assert data["review_count"] == 0

    def test_job_summary_lists_matching_students(self, client, auth_headers, make_job, make_skill, make_student):
        python_id, sql_id = make_skill("Python"), make_skill("SQL")
        job_id = make_job(required_skill_ids=[python_id, sql_id])
        strong, partial, none = make_student(), make_student(), make_student()
        for student_id, skill_ids in ((strong, [python_id, sql_id]), (partial, [sql_id])):
            for skill_id in skill_ids:
                client.post("/api/student-skills", json={"student_id": student_id, "skill_id": skill_id},
                            headers=auth_headers)

        data = client.get(f"/api/analytics/jobs/{job_id}").json()["data"]
        matches = {row["student_id"]: row["skill_match_percentage"] for row in data["matching_students"]}
        assert matches == {strong: 100.0, partial: 50.0}
        assert sorted(data["required_skills"]) == ["Python", "SQL"]

    def test_missing_entities_are_404(self, client):
        assert client.get("/api/analytics/students/9").status_code == 404
        assert client.get("/api/analytics/companies/9").status_code == 404
        assert client.get("/api/analytics/jobs/9").status_code == 404

    def test_timeline(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        client.put(f"/api/applications/{application_id}/status", json={"status": "Under Review"},
                   headers=auth_headers)
        data = client.get("/api/analytics/timeline", params={"days": 7}).json()["data"]
        assert [row["to_status"] for row in data] == ["Under Review", "Pending"]

    def test_timeline_window_excludes_older_history(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        client.put(f"/api/applications/{application_id}/status", json={"status": "Under Review"},
                   headers=auth_headers)

        def backdate_submission(db):
            db.execute(text(
                "UPDATE application_status_history SET changed_at = :old "
                "WHERE application_id = :id AND from_status IS NULL"
            ), {"old": datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=10), "id": application_id})

        run_in_transaction(backdate_submission)
        recent = client.get("/api/analytics/timeline", params={"days": 7}).json()["data"]
        assert [row["to_status"] for row in recent] == ["Under Review"]
        wider = client.get("/api/analytics/timeline", params={"days": 30}).json()["data"]
        assert [row["to_status"] for row in wider] == ["Under Review", "Pending"]


class TestHealth:
    def test_health_reports_database(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

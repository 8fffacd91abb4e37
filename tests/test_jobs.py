"""Companies, jobs and skills."""

from datetime import date, timedelta


class TestCompanies:
    def test_soft_delete_hides_company(self, client, auth_headers, make_company):
        company_id = make_company(name="Globex")
        response = client.delete(f"/api/companies/{company_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/companies/{company_id}").status_code == 404
        assert client.get("/api/companies/dropdown").json()["data"] == []

    def test_name_reusable_after_soft_delete(self, client, auth_headers, make_company):
        company_id = make_company(name="Initech")
        client.delete(f"/api/companies/{company_id}", headers=auth_headers)
        assert make_company(name="Initech") != company_id

    def test_delete_blocked_by_active_job(self, client, auth_headers, make_company, make_job):
        company_id = make_company()
        make_job(company_id=company_id)
        response = client.delete(f"/api/companies/{company_id}", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Cannot delete company with active jobs"

    def test_duplicate_active_name(self, client, auth_headers, make_company):
        make_company(name="Umbrella")
        response = client.post("/api/companies", json={
            "name": "umbrella", "industry": "Pharma", "city": "Mumbai", "state": "Maharashtra",
            "hr_name": "Alice", "hr_email": "alice@umbrella.com",
        }, headers=auth_headers)
        assert response.status_code == 409


class TestJobs:
    def test_create_with_required_skills(self, client, make_job, make_skill):
        python_id = make_skill("Python")
        sql_id = make_skill("SQL")
        job_id = make_job(required_skill_ids=[sql_id, python_id])

        data = client.get(f"/api/jobs/{job_id}").json()["data"]
        assert data["status"] == "Active"
        assert data["required_skills"] == ["Python", "SQL"]
        assert data["company_name"].startswith("Acme Labs")

    def test_unknown_skill_is_a_field_error(self, client, auth_headers, make_company):
        response = client.post("/api/jobs", json={
            "company_id": make_company(), "title": "Analyst", "required_skill_ids": [404],
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "required_skill_ids"

    def test_deadline_must_follow_posted_date(self, client, auth_headers, make_company):
        today = date.today()
        response = client.post("/api/jobs", json={
            "company_id": make_company(),
            "title": "Analyst",
            "posted_date": str(today),
            "deadline": str(today - timedelta(days=1)),
        }, headers=auth_headers)
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert errors[0]["field"] == "deadline"
        assert errors[0]["message"] == "Deadline must be after posted date"

    def test_deadline_checked_against_stored_posted_date(self, client, auth_headers, make_job):
        job_id = make_job(posted_date=str(date.today()))
        response = client.put(f"/api/jobs/{job_id}", json={"deadline": str(date.today())}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "deadline"

    def test_inactive_company_rejected(self, client, auth_headers, make_company):
        company_id = make_company()
        client.delete(f"/api/companies/{company_id}", headers=auth_headers)
        response = client.post("/api/jobs", json={"company_id": company_id, "title": "Analyst"},
                               headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "company_id"

    def test_update_replaces_skills(self, client, auth_headers, make_job, make_skill):
        job_id = make_job(required_skill_ids=[make_skill("Java")])
        go_id = make_skill("Go")
        response = client.put(f"/api/jobs/{job_id}", json={"required_skill_ids": [go_id]}, headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/jobs/{job_id}").json()["data"]["required_skills"] == ["Go"]

    def test_status_lifecycle(self, client, auth_headers, make_job):
        job_id = make_job()
        for status in ("Paused", "Active", "Closed"):
            response = client.put(f"/api/jobs/{job_id}/status", json={"status": status}, headers=auth_headers)
            assert response.status_code == 200, response.text
            assert response.json()["data"]["status"] == status

        response = client.put(f"/api/jobs/{job_id}/status", json={"status": "Active"}, headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_paused_job_refuses_applications(self, client, auth_headers, make_job, make_student):
        job_id = make_job()
        client.put(f"/api/jobs/{job_id}/status", json={"status": "Paused"}, headers=auth_headers)
        response = client.post("/api/applications", json={"student_id": make_student(), "job_id": job_id},
                               headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "PRECONDITION_FAILED"

    def test_list_filters(self, client, make_job, make_company):
        company_id = make_company()
        make_job(company_id=company_id, job_type="Internship")
        make_job(company_id=company_id)
        make_job()

        body = client.get("/api/jobs", params={"company_id": company_id}).json()
        assert body["pagination"]["total"] == 2
        body = client.get("/api/jobs", params={"job_type": "Internship"}).json()
        assert body["pagination"]["total"] == 1

        stats = client.get("/api/jobs/stats/overview").json()["data"]
        assert stats["by_status"] == {"Active": 3}
        assert stats["by_type"] == {"Full-time": 2, "Internship": 1}

    def test_delete_blocked_by_open_application(self, client, auth_headers, make_job, make_student, apply):
        job_id = make_job()
        apply(make_student(), job_id)
        response = client.delete(f"/api/jobs/{job_id}", headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Cannot delete job with active applications"

    def test_delete_with_only_finished_applications(self, client, auth_headers, make_job, make_student, apply):
        job_id = make_job()
        rejected = apply(make_student(), job_id)
        selected = apply(make_student(), job_id)
        client.put(f"/api/applications/{rejected}/status", json={"status": "Rejected"}, headers=auth_headers)
        for status in ("Under Review", "Shortlisted", "Selected"):
            client.put(f"/api/applications/{selected}/status", json={"status": status}, headers=auth_headers)

        response = client.delete(f"/api/jobs/{job_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/jobs/{job_id}").status_code == 404
        assert client.get("/api/applications", params={"job_id": job_id}).json()["pagination"]["total"] == 0


class TestSkills:
    def test_skill_in_use_cannot_be_deleted(self, client, auth_headers, make_skill, make_student):
        skill_id = make_skill("Docker")
        student_id = make_student()
        response = client.post("/api/student-skills", json={"student_id": student_id, "skill_id": skill_id},
                               headers=auth_headers)
        assert response.status_code == 201

        response = client.delete(f"/api/skills/{skill_id}", headers=auth_headers)
        assert response.status_code == 409

        client.delete(f"/api/student-skills/{student_id}/{skill_id}", headers=auth_headers)
        assert client.delete(f"/api/skills/{skill_id}", headers=auth_headers).status_code == 200

    def test_bulk_assign_reports_each_skill(self, client, auth_headers, make_skill, make_student):
        python_id = make_skill("Python")
        sql_id = make_skill("SQL")
        student_id = make_student()
        client.post("/api/student-skills", json={"student_id": student_id, "skill_id": python_id},
                    headers=auth_headers)

        response = client.post("/api/student-skills/bulk", json={
            "student_id": student_id,
            "skills": [
                {"skill_id": python_id, "proficiency_level": "Expert"},
                {"skill_id": sql_id, "proficiency_level": "Beginner"},
                {"skill_id": 999},
            ],
        }, headers=auth_headers)
        assert response.status_code == 201
        results = {item["skill_id"]: item["status"] for item in response.json()["data"]}
        assert results == {python_id: "skipped", sql_id: "added", 999: "error"}

        skills = client.get(f"/api/student-skills/student/{student_id}").json()["data"]
        assert {s["skill_name"]: s["proficiency_level"] for s in skills} == {
            "Python": "Intermediate", "SQL": "Beginner",
        }

    def test_skill_counts(self, client, make_skill, make_job):
        skill_id = make_skill("Kubernetes")
        make_job(required_skill_ids=[skill_id])
        data = client.get(f"/api/skills/{skill_id}").json()["data"]
        assert data["job_count"] == 1
        assert data["student_count"] == 0

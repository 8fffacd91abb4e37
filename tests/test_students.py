"""Student CRUD, list filters and availability changes."""


class TestStudentCrud:
    def test_create_get_update(self, client, auth_headers, make_student):
        student_id = make_student(first_name="Ravi", email="ravi@college.com")

        response = client.get(f"/api/students/{student_id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "Ravi"
        assert data["status"] == "Available"
        assert data["version"] == 1
        assert data["skills"] == []
        assert data["applications"] == []

        response = client.put(f"/api/students/{student_id}", json={"city": "Nagpur"}, headers=auth_headers)
        assert response.status_code == 200
        data = client.get(f"/api/students/{student_id}").json()["data"]
        assert data["city"] == "Nagpur"
        assert data["first_name"] == "Ravi"

    def test_missing_student_is_404(self, client):
        response = client.get("/api/students/999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Student not found", "code": "NOT_FOUND"}

    def test_duplicate_email_conflicts(self, client, auth_headers, make_student):
        make_student(email="same@college.com")
        response = client.post("/api/students", json={
            "first_name": "Other", "last_name": "Person", "email": "SAME@college.com",
        }, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_invalid_fields_are_reported_per_field(self, client, auth_headers):
        response = client.post("/api/students", json={
            "first_name": "", "last_name": "X", "email": "not-an-email", "age": 12,
        }, headers=auth_headers)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = {error["field"] for error in body["errors"]}
        assert {"first_name", "email", "age"} <= fields

    def test_status_is_not_writable_through_update(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.put(f"/api/students/{student_id}", json={"status": "Selected"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"
        assert client.get(f"/api/students/{student_id}").json()["data"]["status"] == "Available"

    def test_empty_update_is_rejected(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.put(f"/api/students/{student_id}", json={}, headers=auth_headers)
        assert response.status_code == 400


class TestStudentList:
    def test_pagination_counts_the_filtered_set(self, client, make_student):
        for _ in range(5):
            make_student(city="Pune")
        make_student(city="Delhi")

        response = client.get("/api/students", params={"city": "pune", "limit": 2, "page": 2})
        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 2
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_search_by_name(self, client, make_student):
        make_student(first_name="Zoya")
        make_student(first_name="Kiran")
        body = client.get("/api/students", params={"search": "zoy"}).json()
        assert body["pagination"]["total"] == 1
        assert body["data"][0]["first_name"] == "Zoya"

    def test_status_filter(self, client, make_student, make_job, apply):
        applied = make_student()
        make_student()
        apply(applied, make_job())

        body = client.get("/api/students", params={"status": "Applied"}).json()
        assert [row["student_id"] for row in body["data"]] == [applied]

        stats = client.get("/api/students/stats/overview").json()["data"]
        assert stats == {"Applied": 1, "Available": 1}

    def test_unknown_status_value_is_rejected(self, client):
        response = client.get("/api/students", params={"status": "Sleeping"})
        assert response.status_code == 400


class TestStudentAvailability:
    def test_deactivate_and_reactivate(self, client, auth_headers, make_student):
        student_id = make_student()

        response = client.put(f"/api/students/{student_id}/status", json={"status": "Inactive"},
                              headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["from_status"] == "Available"
        assert data["status"] == "Inactive"

        response = client.put(f"/api/students/{student_id}/status", json={"status": "Available", "version": 2},
                              headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/students/{student_id}").json()["data"]["version"] == 3

    def test_applied_student_cannot_be_deactivated(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        apply(student_id, make_job())
        response = client.put(f"/api/students/{student_id}/status", json={"status": "Inactive"},
                              headers=auth_headers)
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_stale_version_is_refused(self, client, auth_headers, make_student):
        student_id = make_student()
        client.put(f"/api/students/{student_id}/status", json={"status": "Inactive"}, headers=auth_headers)
        response = client.put(f"/api/students/{student_id}/status", json={"status": "Available", "version": 1},
                              headers=auth_headers)
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "CONCURRENT_MODIFICATION"
        assert body["retriable"] is True

    def test_inactive_student_cannot_apply(self, client, auth_headers, make_student, make_job):
        student_id = make_student()
        client.put(f"/api/students/{student_id}/status", json={"status": "Inactive"}, headers=auth_headers)
        response = client.post("/api/applications", json={"student_id": student_id, "job_id": make_job()},
                               headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "PRECONDITION_FAILED"


class TestStudentDelete:
    def test_delete_free_student(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.delete(f"/api/students/{student_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/students/{student_id}").status_code == 404

    def test_delete_blocked_by_open_application(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        apply(student_id, make_job())
        response = client.delete(f"/api/students/{student_id}", headers=auth_headers)
        assert response.status_code == 409
        assert "active applications" in response.json()["message"]

    def test_delete_with_only_finished_applications(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        rejected = apply(student_id, make_job())
        selected = apply(student_id, make_job())
        client.put(f"/api/applications/{rejected}/status", json={"status": "Rejected"}, headers=auth_headers)
        for status in ("Under Review", "Shortlisted", "Selected"):
            client.put(f"/api/applications/{selected}/status", json={"status": status}, headers=auth_headers)

        response = client.delete(f"/api/students/{student_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/applications/{rejected}").status_code == 404
        assert client.get(f"/api/applications/{selected}").status_code == 404

"""Education history, projects and the extended student profile."""


class TestEducation:
    def test_create_list_update_delete(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post("/api/education", json={
            "student_id": student_id, "degree": "B.Tech Computer Science", "college": "COEP",
            "cgpa": 3.6, "start_date": "2021-08-01", "end_date": "2025-05-31",
        }, headers=auth_headers)
        assert response.status_code == 201, response.text
        education_id = response.json()["data"]["id"]

        data = client.get(f"/api/education/{education_id}").json()["data"]
        assert data["degree"] == "B.Tech Computer Science"
        assert data["cgpa"] == 3.6
        assert data["student_name"].startswith("Asha")

        response = client.put(f"/api/education/{education_id}", json={"cgpa": 3.8}, headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/education/{education_id}").json()["data"]["cgpa"] == 3.8

        response = client.get("/api/education", params={"college": "coep"})
        assert response.json()["pagination"]["total"] == 1

        response = client.delete(f"/api/education/{education_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/education/{education_id}").status_code == 404

    def test_cgpa_out_of_range_is_rejected(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post("/api/education", json={
            "student_id": student_id, "degree": "BSc", "college": "Fergusson", "cgpa": 4.5,
        }, headers=auth_headers)
        assert response.status_code == 400
        assert {error["field"] for error in response.json()["errors"]} == {"cgpa"}

    def test_end_date_must_follow_start_date(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post("/api/education", json={
            "student_id": student_id, "degree": "BSc", "college": "Fergusson",
            "start_date": "2022-06-01", "end_date": "2022-06-01",
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    def test_update_checks_dates_against_stored_values(self, client, auth_headers, make_student):
        student_id = make_student()
        education_id = client.post("/api/education", json={
            "student_id": student_id, "degree": "BSc", "college": "Fergusson",
            "start_date": "2022-06-01", "end_date": "2025-04-30",
        }, headers=auth_headers).json()["data"]["id"]

        response = client.put(f"/api/education/{education_id}", json={"end_date": "2021-01-01"},
                              headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    def test_unknown_student_is_a_field_error(self, client, auth_headers):
        response = client.post("/api/education", json={
            "student_id": 999, "degree": "BSc", "college": "Fergusson",
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "student_id"

    def test_history_by_student(self, client, auth_headers, make_student):
        student_id = make_student()
        other_id = make_student()
        for degree, start in (("HSC", "2019-06-01"), ("B.Tech", "2021-08-01")):
            client.post("/api/education", json={
                "student_id": student_id, "degree": degree, "college": "COEP", "start_date": start,
            }, headers=auth_headers)
        client.post("/api/education", json={"student_id": other_id, "degree": "BCom", "college": "BMCC"},
                    headers=auth_headers)

        response = client.get(f"/api/education/student/{student_id}")
        assert response.status_code == 200
        assert [row["degree"] for row in response.json()["data"]] == ["B.Tech", "HSC"]

        assert client.get("/api/education/student/999").status_code == 404

    def test_writes_require_authentication(self, client, make_student):
        student_id = make_student()
        response = client.post("/api/education", json={
            "student_id": student_id, "degree": "BSc", "college": "Fergusson",
        })
        assert response.status_code == 401


class TestProjects:
    def _create(self, client, headers, student_id, **overrides):
        body = {"student_id": student_id, "project_name": "Placement tracker", "project_type": "Academic",
                "technologies_used": "Python, FastAPI"}
        body.update(overrides)
        response = client.post("/api/projects", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    def test_create_get_update_delete(self, client, auth_headers, make_student):
        student_id = make_student()
        project_id = self._create(client, auth_headers, student_id,
                                  start_date="2024-01-10", end_date="2024-01-10")

        data = client.get(f"/api/projects/{project_id}").json()["data"]
        assert data["project_name"] == "Placement tracker"
        assert data["end_date"] == "2024-01-10"

        response = client.put(f"/api/projects/{project_id}", json={"description": "Tracks drives"},
                              headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/projects/{project_id}").json()["data"]["description"] == "Tracks drives"

        assert client.delete(f"/api/projects/{project_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/projects/{project_id}").status_code == 404

    def test_end_before_start_is_rejected(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post("/api/projects", json={
            "student_id": student_id, "project_name": "Chatbot",
            "start_date": "2024-03-01", "end_date": "2024-02-01",
        }, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    def test_types_list_is_distinct_and_sorted(self, client, auth_headers, make_student):
        student_id = make_student()
        self._create(client, auth_headers, student_id, project_type="Personal")
        self._create(client, auth_headers, student_id, project_type="Academic")
        self._create(client, auth_headers, student_id, project_type="Academic")
        self._create(client, auth_headers, student_id, project_type=None)

        response = client.get("/api/projects/types/list")
        assert response.status_code == 200
        assert response.json()["data"] == ["Academic", "Personal"]

    def test_search_and_filters(self, client, auth_headers, make_student):
        student_id = make_student()
        other_id = make_student()
        self._create(client, auth_headers, student_id, project_name="Resume parser",
                     technologies_used="spaCy")
        self._create(client, auth_headers, other_id, project_name="Inventory app",
                     project_type="Internship", technologies_used="Django")

        response = client.get("/api/projects", params={"search": "spacy"})
        assert [row["project_name"] for row in response.json()["data"]] == ["Resume parser"]

        response = client.get("/api/projects", params={"project_type": "Internship"})
        assert response.json()["pagination"]["total"] == 1

        response = client.get(f"/api/projects/student/{other_id}")
        assert [row["project_name"] for row in response.json()["data"]] == ["Inventory app"]

    def test_unknown_student(self, client, auth_headers):
        response = client.post("/api/projects", json={"student_id": 999, "project_name": "Ghost"},
                               headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "student_id"
        assert client.get("/api/projects/student/999").status_code == 404


class TestStudentProfile:
    def test_create_then_update(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post(f"/api/student-profiles/student/{student_id}", json={
            "bio": "Final year CS student",
            "linkedin_url": "https://www.linkedin.com/in/asha-rao",
            "salary_expectation": 25000,
        }, headers=auth_headers)
        assert response.status_code == 200, response.text
        assert response.json()["message"] == "Student profile created successfully"

        response = client.post(f"/api/student-profiles/student/{student_id}",
                               json={"github_url": "https://github.com/asharao"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Student profile updated successfully"

        data = client.get(f"/api/student-profiles/student/{student_id}").json()["data"]
        assert data["bio"] == "Final year CS student"
        assert data["linkedin_url"] == "https://www.linkedin.com/in/asha-rao"
        assert data["github_url"] == "https://github.com/asharao"
        assert data["salary_expectation"] == 25000
        assert data["student_status"] == "Available"

    def test_invalid_url_is_a_field_error(self, client, auth_headers, make_student):
        student_id = make_student()
        response = client.post(f"/api/student-profiles/student/{student_id}",
                               json={"linkedin_url": "not a url"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "linkedin_url"

    def test_availability_window_order(self, client, auth_headers, make_student):
        student_id = make_student()
        client.post(f"/api/student-profiles/student/{student_id}",
                    json={"availability_start": "2025-06-01"}, headers=auth_headers)
        response = client.post(f"/api/student-profiles/student/{student_id}",
                               json={"availability_end": "2025-05-01"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "availability_end"

    def test_empty_update_is_rejected(self, client, auth_headers, make_student):
        student_id = make_student()
        client.post(f"/api/student-profiles/student/{student_id}", json={"bio": "Hi"}, headers=auth_headers)
        response = client.post(f"/api/student-profiles/student/{student_id}", json={}, headers=auth_headers)
        assert response.status_code == 400

    def test_missing_student_and_missing_profile(self, client, auth_headers, make_student):
        response = client.post("/api/student-profiles/student/999", json={"bio": "Hi"}, headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Student not found"

        student_id = make_student()
        response = client.get(f"/api/student-profiles/student/{student_id}")
        assert response.status_code == 404
        assert response.json()["message"] == "Student profile not found"

    def test_delete(self, client, auth_headers, manager_headers, make_student):
        student_id = make_student()
        client.post(f"/api/student-profiles/student/{student_id}", json={"bio": "Hi"}, headers=auth_headers)

        response = client.delete(f"/api/student-profiles/student/{student_id}", headers=manager_headers)
        assert response.status_code == 403

        response = client.delete(f"/api/student-profiles/student/{student_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/student-profiles/student/{student_id}").status_code == 404
        assert client.delete(f"/api/student-profiles/student/{student_id}",
                             headers=auth_headers).status_code == 404


class TestStudentDeleteCascades:
    def test_records_go_with_the_student(self, client, auth_headers, make_student):
        student_id = make_student()
        client.post("/api/education", json={"student_id": student_id, "degree": "BSc", "college": "Fergusson"},
                    headers=auth_headers)
        client.post("/api/projects", json={"student_id": student_id, "project_name": "Chatbot"},
                    headers=auth_headers)
        client.post(f"/api/student-profiles/student/{student_id}", json={"bio": "Hi"}, headers=auth_headers)

        assert client.delete(f"/api/students/{student_id}", headers=auth_headers).status_code == 200

        assert client.get("/api/education").json()["pagination"]["total"] == 0
        assert client.get("/api/projects").json()["pagination"]["total"] == 0
        assert client.get(f"/api/student-profiles/student/{student_id}").status_code == 404

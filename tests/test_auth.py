"""Authentication and role checks."""


class TestAuth:
    def test_login_returns_token_and_profile(self, client, auth_headers):
        response = client.get("/api/auth/profile", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["username"] == "officer"
        assert data["role"] == "admin"
        assert "password_hash" not in data
        assert data["last_login"] is not None

    def test_login_with_email(self, client, auth_headers):
        response = client.post("/api/auth/login", json={"username": "officer@placement.com", "password": "secret123"})
        assert response.status_code == 200
        assert response.json()["data"]["token_type"] == "bearer"

    def test_wrong_password_is_rejected(self, client, auth_headers):
        response = client.post("/api/auth/login", json={"username": "officer", "password": "nope"})
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "AUTHENTICATION_ERROR"

    def test_duplicate_username_conflicts(self, client, auth_headers):
        response = client.post("/api/auth/register", json={
            "username": "officer", "email": "other@placement.com", "password": "secret123",
        })
        assert response.status_code == 409

    def test_mutation_without_token(self, client):
        response = client.post("/api/students", json={
            "first_name": "No", "last_name": "Token", "email": "no.token@college.com",
        })
        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_ERROR"

    def test_garbage_token(self, client):
        response = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_reads_are_public(self, client):
        response = client.get("/api/students")
        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_manager_cannot_delete(self, client, manager_headers, make_student):
        student_id = make_student()
        response = client.delete(f"/api/students/{student_id}", headers=manager_headers)
        assert response.status_code == 403
        assert response.json()["code"] == "AUTHORIZATION_ERROR"
        assert client.get(f"/api/students/{student_id}").status_code == 200

    def test_manager_can_create(self, client, manager_headers):
        response = client.post("/api/skills", json={"skill_name": "Go", "category": "Technical"},
                               headers=manager_headers)
        assert response.status_code == 201

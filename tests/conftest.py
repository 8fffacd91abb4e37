"""
Shared fixtures.

The suite runs against an in-memory SQLite database. The environment is set
before anything from `app` is imported so that the cached settings and the
engine pick it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app.db.postgres import engine
from app.db.schema import drop_schema, init_schema
from app.main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    drop_schema(engine)
    init_schema(engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _register_and_login(client, username, role):
    response = client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username}@placement.com",
        "password": "secret123",
        "role": role,
    })
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"username": username, "password": "secret123"})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    return _register_and_login(client, "officer", "admin")


@pytest.fixture
def manager_headers(client):
    return _register_and_login(client, "viewer", "manager")


@pytest.fixture
def make_student(client, auth_headers):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        body = {
            "first_name": "Asha",
            "last_name": f"Rao{counter['n']}",
            "email": f"asha{counter['n']}@college.com",
            "city": "Pune",
            "state": "Maharashtra",
            "age": 21,
        }
        body.update(overrides)
        response = client.post("/api/students", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make


@pytest.fixture
def make_company(client, auth_headers):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        body = {
            "name": f"Acme Labs {counter['n']}",
            "industry": "Software",
            "city": "Bengaluru",
            "state": "Karnataka",
            "hr_name": "Meera",
            "hr_email": f"hr{counter['n']}@acme.com",
        }
        body.update(overrides)
        response = client.post("/api/companies", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make


@pytest.fixture
def make_skill(client, auth_headers):
    def _make(name, category="Technical"):
        response = client.post("/api/skills", json={"skill_name": name, "category": category},
                               headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make


@pytest.fixture
def make_job(client, auth_headers, make_company):
    def _make(company_id=None, **overrides):
        body = {
            "company_id": company_id or make_company(),
            "title": "Backend Developer",
            "job_type": "Full-time",
            "salary": 600000,
            "city": "Bengaluru",
            "posted_date": str(date.today()),
            "deadline": str(date.today() + timedelta(days=30)),
        }
        body.update(overrides)
        response = client.post("/api/jobs", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make


@pytest.fixture
def apply(client, auth_headers):
    def _apply(student_id, job_id):
        response = client.post("/api/applications", json={"student_id": student_id, "job_id": job_id},
                               headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _apply


@pytest.fixture
def make_internship(client, auth_headers, make_company):
    def _make(company_id=None, **overrides):
        body = {
            "company_id": company_id or make_company(),
            "title": "Data Engineering Intern",
            "start_date": str(date.today()),
            "end_date": str(date.today() + timedelta(weeks=12)),
            "stipend": 15000,
        }
        body.update(overrides)
        response = client.post("/api/internships", json=body, headers=auth_headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    return _make

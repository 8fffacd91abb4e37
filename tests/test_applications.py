"""Application workflow and its side effects on students, history and notifications."""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from app.core.errors import ConcurrentModification
from app.services import email_service, notification_service
from app.services.notification_service import NotificationDispatcher
from app.services.transition_engine import TransitionEngine, get_transition_engine


def _set_status(client, headers, application_id, status, **extra):
    return client.put(f"/api/applications/{application_id}/status", json={"status": status, **extra},
                      headers=headers)


def _student_status(client, student_id):
    return client.get(f"/api/students/{student_id}").json()["data"]["status"]


class TestApplicationWorkflow:
    def test_apply_marks_student_applied(self, client, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())

        data = client.get(f"/api/applications/{application_id}").json()["data"]
        assert data["status"] == "Pending"
        assert data["version"] == 1
        assert [(h["from_status"], h["to_status"]) for h in data["history"]] == [(None, "Pending")]
        assert _student_status(client, student_id) == "Applied"

    def test_full_selection(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())

        for status in ("Under Review", "Shortlisted", "Selected"):
            response = _set_status(client, auth_headers, application_id, status, reason=f"moved to {status}")
            assert response.status_code == 200, response.text

        assert _student_status(client, student_id) == "Selected"
        history = client.get(f"/api/applications/{application_id}/history").json()["data"]
        assert [h["to_status"] for h in history] == ["Pending", "Under Review", "Shortlisted", "Selected"]
        assert history[-1]["reason"] == "moved to Selected"
        assert history[-1]["changed_by_username"] == "officer"

    def test_skipping_a_stage_is_invalid(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        response = _set_status(client, auth_headers, application_id, "Selected")
        assert response.status_code == 422
        assert response.json()["message"] == "Cannot move application from 'Pending' to 'Selected'"

    def test_terminal_state_is_final(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        _set_status(client, auth_headers, application_id, "Rejected")
        response = _set_status(client, auth_headers, application_id, "Under Review")
        assert response.status_code == 422

    def test_rejection_releases_student_without_other_open_applications(
        self, client, auth_headers, make_student, make_job, apply
    ):
        student_id = make_student()
        first = apply(student_id, make_job())
        second = apply(student_id, make_job())

        _set_status(client, auth_headers, first, "Rejected")
        assert _student_status(client, student_id) == "Applied"

        _set_status(client, auth_headers, second, "Rejected")
        assert _student_status(client, student_id) == "Available"

    def test_selected_student_cannot_apply_again(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        for status in ("Under Review", "Shortlisted", "Selected"):
            _set_status(client, auth_headers, application_id, status)

        response = client.post("/api/applications", json={"student_id": student_id, "job_id": make_job()},
                               headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["code"] == "PRECONDITION_FAILED"

    def test_second_selection_is_refused(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        first = apply(student_id, make_job())
        second = apply(student_id, make_job())
        for status in ("Under Review", "Shortlisted"):
            _set_status(client, auth_headers, first, status)
            _set_status(client, auth_headers, second, status)

        assert _set_status(client, auth_headers, first, "Selected").status_code == 200
        response = _set_status(client, auth_headers, second, "Selected")
        assert response.status_code == 409
        assert response.json()["code"] == "PRECONDITION_FAILED"
        data = client.get(f"/api/applications/{second}").json()["data"]
        assert data["status"] == "Shortlisted"


class TestApplicationConstraints:
    def test_duplicate_application_conflicts(self, client, auth_headers, make_student, make_job, apply):
        student_id, job_id = make_student(), make_job()
        apply(student_id, job_id)
        response = client.post("/api/applications", json={"student_id": student_id, "job_id": job_id},
                               headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Student has already applied for this job"

    def test_closed_job(self, client, auth_headers, make_student, make_job):
        job_id = make_job()
        client.put(f"/api/jobs/{job_id}/status", json={"status": "Closed"}, headers=auth_headers)
        response = client.post("/api/applications", json={"student_id": make_student(), "job_id": job_id},
                               headers=auth_headers)
        assert response.status_code == 409
        assert "not accepting applications" in response.json()["message"]

    def test_unknown_student_or_job(self, client, auth_headers, make_student, make_job):
        response = client.post("/api/applications", json={"student_id": 999, "job_id": make_job()},
                               headers=auth_headers)
        assert response.status_code == 409
        response = client.post("/api/applications", json={"student_id": make_student(), "job_id": 999},
                               headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Job not found"

    def test_status_not_writable_through_update(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        response = client.put(f"/api/applications/{application_id}", json={"status": "Selected"},
                              headers=auth_headers)
        assert response.status_code == 400

        response = client.put(f"/api/applications/{application_id}", json={"cover_letter": "Hello"},
                              headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/applications/{application_id}").json()["data"]["cover_letter"] == "Hello"

    def test_delete_releases_student(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        response = client.delete(f"/api/applications/{application_id}", headers=auth_headers)
        assert response.status_code == 200
        assert client.get(f"/api/applications/{application_id}").status_code == 404
        assert _student_status(client, student_id) == "Available"

    def test_list_and_stats(self, client, auth_headers, make_student, make_job, apply, make_company):
        company_id = make_company()
        job_id = make_job(company_id=company_id)
        for _ in range(3):
            apply(make_student(), job_id)
        rejected = apply(make_student(), make_job())
        _set_status(client, auth_headers, rejected, "Rejected")

        body = client.get("/api/applications", params={"company_id": company_id, "limit": 2}).json()
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["pages"] == 2

        stats = client.get("/api/applications/stats/overview").json()["data"]
        assert stats == {"Pending": 3, "Rejected": 1}


class TestConcurrency:
    def test_stale_expected_status(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        _set_status(client, auth_headers, application_id, "Under Review")

        response = _set_status(client, auth_headers, application_id, "Rejected", expected_status="Pending")
        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "CONCURRENT_MODIFICATION"
        assert body["retriable"] is True
        assert client.get(f"/api/applications/{application_id}").json()["data"]["status"] == "Under Review"

    def test_stale_version(self, client, auth_headers, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        _set_status(client, auth_headers, application_id, "Under Review", version=1)

        response = _set_status(client, auth_headers, application_id, "Shortlisted", version=1)
        assert response.status_code == 409
        assert response.json()["code"] == "CONCURRENT_MODIFICATION"

    def test_racing_transitions_only_one_wins(self, client, make_student, make_job, apply):
        application_id = apply(make_student(), make_job())
        engine = get_transition_engine()

        engine.attempt_transition("application", application_id, "Pending", "Under Review")
        with pytest.raises(ConcurrentModification):
            engine.attempt_transition("application", application_id, "Pending", "Rejected")

        history = client.get(f"/api/applications/{application_id}/history").json()["data"]
        assert [h["to_status"] for h in history] == ["Pending", "Under Review"]

    def test_failed_side_effect_rolls_back_transition(self, client, auth_headers, make_student, make_job, apply,
                                                      monkeypatch):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        for status in ("Under Review", "Shortlisted"):
            _set_status(client, auth_headers, application_id, status)

        def crash(*args, **kwargs):
            raise RuntimeError("storage went away")

        monkeypatch.setattr(TransitionEngine, "_set_student_status", crash)
        with pytest.raises(RuntimeError):
            get_transition_engine().attempt_transition("application", application_id, "Shortlisted", "Selected")
        monkeypatch.undo()

        data = client.get(f"/api/applications/{application_id}").json()["data"]
        assert data["status"] == "Shortlisted"
        assert [h["to_status"] for h in data["history"]][-1] == "Shortlisted"
        assert _student_status(client, student_id) == "Applied"


class TestNotifications:
    def test_transition_stores_notification(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        _set_status(client, auth_headers, application_id, "Under Review")

        body = client.get("/api/notifications", params={"student_id": student_id}).json()
        assert body["pagination"]["total"] == 2
        assert "Under Review" in body["data"][0]["message"]
        unread = client.get("/api/notifications/unread-count", params={"student_id": student_id}).json()
        assert unread["data"]["unread"] == 2

    def test_notification_failure_does_not_undo_transition(self, client, auth_headers, make_student, make_job,
                                                           apply, monkeypatch):
        student_id = make_student()
        application_id = apply(student_id, make_job())

        def broken_store(self, notice):
            raise RuntimeError("notifications table locked")

        monkeypatch.setattr(NotificationDispatcher, "store", broken_store)
        response = _set_status(client, auth_headers, application_id, "Under Review")

        assert response.status_code == 200
        assert response.json()["data"]["warnings"] == [
            f"Notification for student {student_id} could not be stored"
        ]
        assert client.get(f"/api/applications/{application_id}").json()["data"]["status"] == "Under Review"

    def test_email_failure_is_a_warning(self, client, auth_headers, make_student, make_job, apply, monkeypatch):
        student_id = make_student(email="mail.me@college.com")
        application_id = apply(student_id, make_job())
        sent = []

        def failing_send(to, subject, body):
            sent.append((to, subject))
            raise ConnectionRefusedError("smtp down")

        monkeypatch.setattr(notification_service, "get_settings", lambda: SimpleNamespace(smtp_configured=True))
        monkeypatch.setattr(email_service, "send_email", failing_send)
        response = _set_status(client, auth_headers, application_id, "Rejected")

        assert response.status_code == 200
        assert response.json()["data"]["warnings"] == ["Email to mail.me@college.com could not be sent"]
        assert sent[0][0] == "mail.me@college.com"
        # the in-app notification is still stored
        body = client.get("/api/notifications", params={"student_id": student_id, "type": "warning"}).json()
        assert body["pagination"]["total"] == 1


class TestInterviews:
    def _schedule(self, client, headers, application_id, when=None):
        when = when or datetime.now().replace(microsecond=0) + timedelta(days=3)
        response = client.post("/api/interviews", json={
            "application_id": application_id,
            "mode": "Online",
            "interview_date": when.isoformat(),
            "interviewer_name": "Dev",
        }, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["id"]

    def test_schedule_and_complete(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        interview_id = self._schedule(client, auth_headers, application_id)

        data = client.get(f"/api/interviews/{interview_id}").json()["data"]
        assert data["status"] == "Scheduled"
        assert data["student_id"] == student_id

        response = client.put(f"/api/interviews/{interview_id}/status", json={
            "status": "Completed", "interview_score": 82, "feedback": "Strong fundamentals",
        }, headers=auth_headers)
        assert response.status_code == 200
        data = client.get(f"/api/interviews/{interview_id}").json()["data"]
        assert data["interview_score"] == 82
        assert data["feedback"] == "Strong fundamentals"
        # completing an interview leaves the application alone
        assert client.get(f"/api/applications/{application_id}").json()["data"]["status"] == "Pending"

    def test_reschedule_requires_new_date(self, client, auth_headers, make_student, make_job, apply):
        interview_id = self._schedule(client, auth_headers, apply(make_student(), make_job()))
        client.put(f"/api/interviews/{interview_id}/status", json={"status": "Rescheduled"}, headers=auth_headers)

        response = client.put(f"/api/interviews/{interview_id}/status", json={"status": "Scheduled"},
                              headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "interview_date"

        new_date = (datetime.now() + timedelta(days=10)).replace(microsecond=0)
        response = client.put(f"/api/interviews/{interview_id}/status", json={
            "status": "Scheduled", "interview_date": new_date.isoformat(),
        }, headers=auth_headers)
        assert response.status_code == 200
        data = client.get(f"/api/interviews/{interview_id}").json()["data"]
        assert data["interview_date"].startswith(new_date.date().isoformat())

    def test_score_out_of_range(self, client, auth_headers, make_student, make_job, apply):
        interview_id = self._schedule(client, auth_headers, apply(make_student(), make_job()))
        response = client.put(f"/api/interviews/{interview_id}/status", json={
            "status": "Completed", "interview_score": 140,
        }, headers=auth_headers)
        assert response.status_code == 400

    def test_unknown_application(self, client, auth_headers):
        response = client.post("/api/interviews", json={
            "application_id": 404, "mode": "Phone", "interview_date": "2030-01-01T10:00:00",
        }, headers=auth_headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Application not found"

    def test_upcoming(self, client, auth_headers, make_student, make_job, apply):
        interview_id = self._schedule(client, auth_headers, apply(make_student(), make_job()))
        data = client.get("/api/interviews/upcoming").json()["data"]
        assert [row["interview_id"] for row in data] == [interview_id]


def _select(client, headers, application_id):
    for status in ("Under Review", "Shortlisted", "Selected"):
        response = _set_status(client, headers, application_id, status)
        assert response.status_code == 200, response.text


class TestSelectedStudentRelease:
    def test_deleting_selected_application_frees_student(self, client, auth_headers, make_student, make_job,
                                                         apply):
        student_id = make_student()
        application_id = apply(student_id, make_job())
        _select(client, auth_headers, application_id)
        assert _student_status(client, student_id) == "Selected"

        response = client.delete(f"/api/applications/{application_id}", headers=auth_headers)
        assert response.status_code == 200
        assert _student_status(client, student_id) == "Available"

    def test_deleting_selected_application_keeps_other_open_ones(self, client, auth_headers, make_student,
                                                                 make_job, apply):
        student_id = make_student()
        selected = apply(student_id, make_job())
        pending = apply(student_id, make_job())
        _select(client, auth_headers, selected)

        client.delete(f"/api/applications/{selected}", headers=auth_headers)
        assert _student_status(client, student_id) == "Applied"
        assert client.get(f"/api/applications/{pending}").json()["data"]["status"] == "Pending"

    def test_deleting_job_frees_selected_student(self, client, auth_headers, make_student, make_job, apply):
        student_id = make_student()
        job_id = make_job()
        _select(client, auth_headers, apply(student_id, job_id))

        response = client.delete(f"/api/jobs/{job_id}", headers=auth_headers)
        assert response.status_code == 200
        assert _student_status(client, student_id) == "Available"

    def test_rejecting_other_application_keeps_selection(self, client, auth_headers, make_student, make_job,
                                                         apply):
        student_id = make_student()
        selected = apply(student_id, make_job())
        other = apply(student_id, make_job())
        _select(client, auth_headers, selected)

        assert _set_status(client, auth_headers, other, "Rejected").status_code == 200
        assert _student_status(client, student_id) == "Selected"

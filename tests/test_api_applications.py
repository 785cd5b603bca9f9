"""
Application lifecycle through the HTTP layer: apply, review, interview,
hire and withdraw, with the job counters checked after each step.
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import pytest

from core.context import utcnow
from database.models import Application
from database.repositories import ApplicationRepository

pytestmark = [pytest.mark.api, pytest.mark.db]

INTERVIEW = {
    "scheduledDate": "2030-03-02T15:00:00Z",
    "duration": 45,
    "type": "online",
    "meetingLink": "https://meet.example.com/abc",
}


@pytest.fixture
def parties(make_user, make_job):
    employer = make_user("employer", name="Acme Hiring")
    candidate = make_user("candidate", name="Jane Doe")
    job = make_job(employer)
    return employer, candidate, job


def apply(client, headers, job, cover_letter="I would love to join", files=None):
    return client.post(
        "/api/applications",
        data={"jobId": str(job.id), "coverLetter": cover_letter},
        files=files,
        headers=headers,
    )


def test_full_lifecycle_keeps_counters_in_step(client, db_session, parties, auth_headers, notifier):
    employer, candidate, job = parties

    response = apply(client, auth_headers(candidate), job)
    assert response.status_code == 201
    application = response.json()["application"]
    assert application["status"] == "pending"
    assert len(application["statusHistory"]) == 1
    assert application["statusHistory"][0]["note"] == "Application submitted"
    app_id = application["id"]

    db_session.refresh(job)
    assert job.applications_count == 1

    response = client.put(
        f"/api/applications/{app_id}/status",
        json={"status": "reviewed"},
        headers=auth_headers(employer),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Application status updated to reviewed"
    assert len(body["application"]["statusHistory"]) == 2

    response = client.post(
        f"/api/applications/{app_id}/interview", json=INTERVIEW, headers=auth_headers(employer)
    )
    assert response.status_code == 200
    application = response.json()["application"]
    assert application["status"] == "interview"
    assert application["interviewDetails"]["meetingLink"] == "https://meet.example.com/abc"
    assert application["statusHistory"][-1]["note"] == "Interview scheduled for 3/2/2030"
    assert len(application["statusHistory"]) == 3

    response = client.put(
        f"/api/applications/{app_id}/status",
        json={"status": "hired", "note": "Welcome aboard"},
        headers=auth_headers(employer),
    )
    assert response.status_code == 200

    db_session.refresh(job)
    assert job.applications_count == 1
    assert job.hired_count == 1

    sent_statuses = [c.kwargs["status"] for c in notifier.send_status_notifications.call_args_list]
    assert sent_statuses == ["reviewed", "interview", "hired"]


def test_duplicate_application_conflicts(client, parties, auth_headers):
    _, candidate, job = parties
    assert apply(client, auth_headers(candidate), job).status_code == 201

    response = apply(client, auth_headers(candidate), job)
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_withdraw_then_reapply(client, db_session, parties, auth_headers):
    _, candidate, job = parties
    headers = auth_headers(candidate)
    app_id = apply(client, headers, job).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{app_id}/withdraw", json={"reason": "Took another offer"}, headers=headers
    )
    assert response.status_code == 200

    db_session.expire_all()
    withdrawn = db_session.get(Application, uuid.UUID(app_id))
    assert withdrawn.is_deleted is True
    assert withdrawn.status == "withdrawn"
    assert withdrawn.withdrawal_reason == "Took another offer"
    assert withdrawn.status_history[-1].status == "withdrawn"

    db_session.refresh(job)
    assert job.applications_count == 0

    assert client.get(f"/api/applications/{app_id}", headers=headers).status_code == 404
    assert apply(client, headers, job).status_code == 201


def test_cannot_withdraw_hired_application(client, parties, auth_headers):
    employer, candidate, job = parties
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]
    client.put(
        f"/api/applications/{app_id}/status", json={"status": "hired"}, headers=auth_headers(employer)
    )

    response = client.put(f"/api/applications/{app_id}/withdraw", headers=auth_headers(candidate))
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot withdraw application with status: hired"


def test_employer_cannot_set_withdrawn(client, parties, auth_headers):
    employer, candidate, job = parties
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{app_id}/status", json={"status": "withdrawn"}, headers=auth_headers(employer)
    )
    assert response.status_code == 400


def test_interview_status_requires_details(client, parties, auth_headers):
    employer, candidate, job = parties
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{app_id}/status", json={"status": "interview"}, headers=auth_headers(employer)
    )
    assert response.status_code == 400


def test_repeated_hired_counts_again(client, db_session, parties, auth_headers):
    employer, candidate, job = parties
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    for _ in range(2):
        response = client.put(
            f"/api/applications/{app_id}/status", json={"status": "hired"}, headers=auth_headers(employer)
        )
        assert response.status_code == 200

    db_session.refresh(job)
    assert job.hired_count == 2
    assert len(response.json()["application"]["statusHistory"]) == 3


def test_notification_failure_does_not_block_status_change(client, parties, auth_headers, notifier):
    employer, candidate, job = parties
    notifier.send_status_notifications.side_effect = RuntimeError("SMTP down")
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{app_id}/status", json={"status": "shortlisted"}, headers=auth_headers(employer)
    )
    assert response.status_code == 200
    assert response.json()["application"]["status"] == "shortlisted"


def test_other_employer_cannot_update(client, make_user, parties, auth_headers):
    _, candidate, job = parties
    stranger = make_user("employer")
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    response = client.put(
        f"/api/applications/{app_id}/status", json={"status": "reviewed"}, headers=auth_headers(stranger)
    )
    assert response.status_code == 403


def test_resume_upload(client, parties, auth_headers):
    employer, candidate, job = parties
    response = apply(
        client, auth_headers(candidate), job,
        files={"resume": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")},
    )
    assert response.status_code == 201
    resume = response.json()["application"]["resume"]
    assert resume["originalName"] == "cv.pdf"
    assert resume["url"].startswith("/uploads/resumes/")

    app_id = response.json()["application"]["id"]
    response = client.get(f"/api/applications/{app_id}/resume", headers=auth_headers(employer))
    assert response.status_code == 200
    assert response.json()["resume"]["mimetype"] == "application/pdf"


def test_racing_duplicate_removes_its_resume(client, storage, parties, auth_headers):
    _, candidate, job = parties
    resume = {"resume": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")}
    assert apply(client, auth_headers(candidate), job, files=resume).status_code == 201

    # a second request that passed the duplicate check before the first was written
    with patch.object(ApplicationRepository, "find_live_for", return_value=None):
        response = apply(client, auth_headers(candidate), job, files=resume)

    assert response.status_code == 409
    stored = list((storage.root / "resumes").iterdir())
    assert len(stored) == 1


def test_rejected_resume_leaves_no_application(client, db_session, parties, auth_headers):
    _, candidate, job = parties
    response = apply(
        client, auth_headers(candidate), job,
        files={"resume": ("cv.exe", b"MZ", "application/octet-stream")},
    )
    assert response.status_code == 502
    assert db_session.query(Application).count() == 0
    db_session.refresh(job)
    assert job.applications_count == 0


def test_apply_to_expired_job(client, make_job, parties, auth_headers):
    employer, candidate, _ = parties

    expired = make_job(employer, expiration_date=utcnow() - timedelta(days=1))
    response = apply(client, auth_headers(candidate), expired)
    assert response.status_code == 404


def test_auth_required_and_role_checked(client, parties, auth_headers):
    employer, _, job = parties
    assert apply(client, {}, job).status_code == 401
    assert apply(client, {"Authorization": "Bearer nonsense"}, job).status_code == 401
    assert apply(client, auth_headers(employer), job).status_code == 403


def test_notes_and_views(client, parties, auth_headers):
    employer, candidate, job = parties
    app_id = apply(client, auth_headers(candidate), job).json()["application"]["id"]

    response = client.post(
        f"/api/applications/{app_id}/notes", json={"text": "Strong SQL"}, headers=auth_headers(employer)
    )
    assert response.status_code == 200
    assert response.json()["notes"][0]["text"] == "Strong SQL"

    response = client.get(f"/api/applications/{app_id}", headers=auth_headers(employer))
    application = response.json()["application"]
    assert application["viewedByEmployer"] is True
    assert application["statusBadge"]["label"] == "Pending"


def test_listing_and_stats(client, parties, auth_headers):
    employer, candidate, job = parties
    apply(client, auth_headers(candidate), job)

    response = client.get("/api/applications/candidate", headers=auth_headers(candidate))
    assert response.json()["pagination"]["totalItems"] == 1
    assert response.json()["applications"][0]["job"]["jobTitle"] == "Backend Engineer"

    response = client.get(
        "/api/applications/employer", params={"jobId": str(job.id)}, headers=auth_headers(employer)
    )
    assert response.json()["applications"][0]["candidate"]["name"] == "Jane Doe"

    stats = client.get("/api/applications/stats", headers=auth_headers(employer)).json()["stats"]
    assert stats["byStatus"]["pending"] == 1
    assert stats["total"] == 1

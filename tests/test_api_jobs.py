"""
Job listing, search and employer management through the HTTP layer.
"""

from datetime import timedelta

import pytest

from core.context import utcnow
from database.models import Job

pytestmark = [pytest.mark.api, pytest.mark.db]


def new_job_payload(**overrides):
    payload = {
        "jobTitle": "Senior Python Developer",
        "jobDescription": "Own our data APIs end to end.",
        "jobType": "Full-time",
        "minSalary": 90000,
        "maxSalary": 120000,
        "country": "USA",
        "city": "Austin",
        "experienceLevel": "5-10 years",
        "educationLevel": "Bachelor's Degree",
        "jobCategory": "Engineering",
        "tags": "python, fastapi",
        "expirationDate": (utcnow() + timedelta(days=20)).isoformat(),
    }
    payload.update(overrides)
    return payload


def test_salary_overlap_filter(client, make_user, make_job):
    employer = make_user("employer")
    make_job(employer, job_title="Low", salary_min=20000, salary_max=40000)
    make_job(employer, job_title="Mid", salary_min=30000, salary_max=60000)
    make_job(employer, job_title="High", salary_min=50000, salary_max=80000)

    response = client.get("/api/jobs", params={"minSalary": 50000, "jobType": "Full-time"})
    assert response.status_code == 200
    body = response.json()
    assert sorted(j["jobTitle"] for j in body["jobs"]) == ["High", "Mid"]
    assert body["pagination"]["totalItems"] == 2


def test_listing_hides_closed_and_expired(client, make_user, make_job):
    employer = make_user("employer")
    make_job(employer, job_title="Open")
    make_job(employer, job_title="Closed", status="Closed")
    make_job(employer, job_title="Overdue", expiration_date=utcnow() - timedelta(hours=1))

    titles = [j["jobTitle"] for j in client.get("/api/jobs").json()["jobs"]]
    assert titles == ["Open"]


def test_search_text_location_and_tags(client, make_user, make_job):
    employer = make_user("employer")
    make_job(employer, job_title="Data Engineer", city="Denver", tags=["spark"])
    make_job(employer, job_title="Frontend Developer", city="Austin", tags=["react"])

    jobs = client.get("/api/jobs/search", params={"search": "data"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Data Engineer"]

    jobs = client.get("/api/jobs/search", params={"location": "austin"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Frontend Developer"]

    jobs = client.get("/api/jobs/search", params={"tags": "react,go"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Frontend Developer"]

    jobs = client.get("/api/jobs/search", params={"location": "all"}).json()["jobs"]
    assert len(jobs) == 2


def test_tags_match_per_element_including_non_ascii(client, make_user, make_job):
    employer = make_user("employer")
    make_job(employer, job_title="Barista", job_description="Espresso bar", tags=["café", "latte art"])
    make_job(employer, job_title="Baker", job_description="Bread", tags=["pastry"])

    jobs = client.get("/api/jobs", params={"search": "café"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Barista"]

    jobs = client.get("/api/jobs/search", params={"tags": "café"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Barista"]

    jobs = client.get("/api/jobs/search", params={"tags": "LATTE"}).json()["jobs"]
    assert [j["jobTitle"] for j in jobs] == ["Barista"]

    # separators of the stored array are not part of any tag
    assert client.get("/api/jobs", params={"search": "\",\""}).json()["jobs"] == []


def test_pagination_and_unknown_sort(client, make_user, make_job):
    employer = make_user("employer")
    now = utcnow()
    for i in range(3):
        make_job(employer, job_title=f"Job {i}", posted_date=now - timedelta(days=i))

    body = client.get("/api/jobs", params={"limit": 2, "page": 2, "sortBy": "dropTable"}).json()
    assert [j["jobTitle"] for j in body["jobs"]] == ["Job 2"]
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 2,
        "totalItems": 3,
        "hasNextPage": False,
        "hasPrevPage": True,
    }


def test_create_job_generates_unique_slug(client, make_user, auth_headers):
    employer = make_user("employer")
    first = client.post("/api/jobs", json=new_job_payload(), headers=auth_headers(employer))
    second = client.post("/api/jobs", json=new_job_payload(), headers=auth_headers(employer))

    assert first.status_code == 201
    job = first.json()["job"]
    assert job["slug"] == "senior-python-developer"
    assert job["tags"] == ["python", "fastapi"]
    assert job["applicationsCount"] == 0
    assert job["metaTitle"] == "Senior Python Developer - Job Opportunity"
    assert second.json()["job"]["slug"] == "senior-python-developer-1"

    response = client.get("/api/jobs/senior-python-developer")
    assert response.status_code == 200
    assert response.json()["job"]["views"] == 1


def test_create_job_validation(client, make_user, auth_headers):
    employer = make_user("employer")
    headers = auth_headers(employer)

    response = client.post("/api/jobs", json=new_job_payload(jobTitle=""), headers=headers)
    assert response.status_code == 400
    assert response.json()["missing"] == ["jobTitle"]

    past = (utcnow() - timedelta(days=1)).isoformat()
    response = client.post("/api/jobs", json=new_job_payload(expirationDate=past), headers=headers)
    assert response.status_code == 400

    response = client.post("/api/jobs", json=new_job_payload(minSalary=200000), headers=headers)
    assert response.status_code == 400


def test_counters_cannot_be_set_by_clients(client, make_user, make_job, auth_headers):
    employer = make_user("employer")
    job = make_job(employer)

    response = client.put(
        f"/api/jobs/{job.id}",
        json={"jobTitle": "Staff Engineer", "applicationsCount": 99, "views": 1000},
        headers=auth_headers(employer),
    )
    assert response.status_code == 200
    body = response.json()["job"]
    assert body["jobTitle"] == "Staff Engineer"
    assert body["applicationsCount"] == 0
    assert body["views"] == 0
    assert body["slug"] == "staff-engineer"


def test_update_and_close_require_ownership(client, db_session, make_user, make_job, auth_headers):
    owner, stranger = make_user("employer"), make_user("employer")
    job = make_job(owner)

    response = client.put(f"/api/jobs/{job.id}", json={"city": "Boston"}, headers=auth_headers(stranger))
    assert response.status_code == 403
    assert client.delete(f"/api/jobs/{job.id}", headers=auth_headers(stranger)).status_code == 403

    response = client.delete(f"/api/jobs/{job.id}", headers=auth_headers(owner))
    assert response.status_code == 200
    db_session.refresh(job)
    assert job.status == "Closed"
    assert db_session.get(Job, job.id) is not None


def test_promote_and_expire(client, make_user, make_job, auth_headers):
    employer = make_user("employer")
    job = make_job(employer)
    headers = auth_headers(employer)

    response = client.patch(f"/api/jobs/{job.id}/promote", json={"action": "feature"}, headers=headers)
    assert response.json()["job"]["isFeatured"] is True

    response = client.patch(f"/api/jobs/{job.id}/promote", json={"action": "boost"}, headers=headers)
    assert response.status_code == 400

    assert client.patch(f"/api/jobs/{job.id}/expire", headers=headers).status_code == 200
    assert client.get("/api/jobs").json()["jobs"] == []


def test_my_jobs_expires_overdue_and_counts_applications(client, make_user, make_job, auth_headers):
    employer = make_user("employer")
    make_job(employer, job_title="Overdue", expiration_date=utcnow() - timedelta(days=1))
    make_job(employer, job_title="Open")

    body = client.get("/api/jobs/employer/my-jobs", headers=auth_headers(employer)).json()
    statuses = {j["jobTitle"]: j["status"] for j in body["jobs"]}
    assert statuses == {"Overdue": "Expired", "Open": "Active"}
    assert body["stats"]["totalJobs"] == 2
    assert body["stats"]["activeJobs"] == 1
    assert body["jobs"][0]["applicationStats"]["total"] == 0


def test_candidate_sees_saved_flag(client, make_user, make_job, auth_headers):
    employer, candidate = make_user("employer"), make_user("candidate")
    job = make_job(employer)
    client.post(f"/api/saved-jobs/{job.id}/save", headers=auth_headers(candidate))

    jobs = client.get("/api/jobs", headers=auth_headers(candidate)).json()["jobs"]
    assert jobs[0]["isSaved"] is True
    assert client.get("/api/jobs").json()["jobs"][0]["isSaved"] is None


def test_filter_options(client, make_user, make_job):
    employer = make_user("employer")
    make_job(employer, city="Austin", salary_min=40000, salary_max=90000)
    make_job(employer, city="Denver", job_type="Contract")

    filters = client.get("/api/jobs/filters").json()["filters"]
    assert filters["cities"] == ["Austin", "Denver"]
    assert filters["jobTypes"] == ["Contract", "Full-time"]
    assert filters["salaryRange"]["maxSalary"] == 90000


def test_unknown_job(client):
    response = client.get("/api/jobs/no-such-slug")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Job not found", "type": "NotFoundError"}


def test_admin_recomputes_drifted_counters(client, db_session, make_user, make_job, auth_headers):
    employer, candidate, admin = make_user("employer"), make_user("candidate"), make_user("admin")
    job = make_job(employer)
    response = client.post(
        "/api/applications", data={"jobId": str(job.id), "coverLetter": "Hello"}, headers=auth_headers(candidate)
    )
    assert response.status_code == 201

    db_session.refresh(job)
    job.applications_count = 9
    job.hired_count = 4
    db_session.commit()

    url = f"/api/jobs/{job.id}/recompute-counters"
    assert client.post(url, headers=auth_headers(employer)).status_code == 403
    assert client.post(url).status_code == 401

    response = client.post(url, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["applicationsCount"] == 1
    assert response.json()["hiredCount"] == 0

    db_session.refresh(job)
    assert (job.applications_count, job.hired_count) == (1, 0)

    unknown = "/api/jobs/6ba7b810-9dad-11d1-80b4-00c04fd430c8/recompute-counters"
    assert client.post(unknown, headers=auth_headers(admin)).status_code == 404

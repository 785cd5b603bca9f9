"""
Saved jobs, search history and employer pipeline statuses through the HTTP layer.
"""

from datetime import timedelta

import pytest

from core.context import utcnow
from web.backend.auth import issue_token
from web.backend.config import get_config

pytestmark = [pytest.mark.api, pytest.mark.db]


# === Saved jobs ===

def test_save_check_note_and_unsave(client, make_user, make_job, auth_headers):
    candidate = make_user("candidate")
    job = make_job(make_user("employer"))
    headers = auth_headers(candidate)

    response = client.post(f"/api/saved-jobs/{job.id}/save", headers=headers)
    assert response.status_code == 201
    assert response.json()["savedJob"]["job"]["jobTitle"] == "Backend Engineer"

    assert client.post(f"/api/saved-jobs/{job.id}/save", headers=headers).status_code == 409
    assert client.get(f"/api/saved-jobs/{job.id}/check", headers=headers).json()["isSaved"] is True
    assert client.get("/api/saved-jobs/count", headers=headers).json()["count"] == 1

    response = client.put(f"/api/saved-jobs/{job.id}/note", json={"notes": "Apply by Friday"}, headers=headers)
    assert response.json()["savedJob"]["notes"] == "Apply by Friday"

    body = client.get("/api/saved-jobs", headers=headers).json()
    assert body["pagination"]["totalItems"] == 1
    assert body["savedJobs"][0]["notes"] == "Apply by Friday"

    assert client.delete(f"/api/saved-jobs/{job.id}/unsave", headers=headers).status_code == 200
    assert client.delete(f"/api/saved-jobs/{job.id}/unsave", headers=headers).status_code == 404
    assert client.get(f"/api/saved-jobs/{job.id}/check", headers=headers).json()["isSaved"] is False


def test_saving_unknown_job(client, make_user, auth_headers):
    candidate = make_user("candidate")
    response = client.post(
        "/api/saved-jobs/6ba7b810-9dad-11d1-80b4-00c04fd430c8/save", headers=auth_headers(candidate)
    )
    assert response.status_code == 404

    response = client.post("/api/saved-jobs/not-a-uuid/save", headers=auth_headers(candidate))
    assert response.status_code == 400


def test_saved_jobs_are_per_user(client, make_user, make_job, auth_headers):
    first, second = make_user("candidate"), make_user("candidate")
    job = make_job(make_user("employer"))
    client.post(f"/api/saved-jobs/{job.id}/save", headers=auth_headers(first))

    assert client.get("/api/saved-jobs/count", headers=auth_headers(second)).json()["count"] == 0


# === Search history ===

def log_search(client, query, headers=None, **extra):
    return client.post("/api/search-history", json={"searchQuery": query, **extra}, headers=headers or {})


def test_repeat_search_bumps_count_and_merges_filters(client, make_user, auth_headers):
    user = make_user("candidate")
    headers = auth_headers(user)

    first = log_search(client, "  Python Developer ", headers, searchType="job", filters={"jobType": "Full-time"})
    assert first.status_code == 201
    assert first.json()["search"]["searchQuery"] == "python developer"

    second = log_search(client, "python developer", headers, filters={"city": "Austin"}).json()["search"]
    assert second["searchCount"] == 2
    assert second["filters"] == {"jobType": "Full-time", "city": "Austin"}

    history = client.get("/api/search-history/history", headers=headers).json()["searchHistory"]
    assert len(history) == 1


def test_short_queries_are_rejected(client):
    response = log_search(client, "a")
    assert response.status_code == 400
    assert response.json()["message"] == "Search query must be at least 2 characters long"


def test_popular_trending_and_suggestions(client, make_user, auth_headers):
    alice, bob = make_user("candidate"), make_user("candidate")
    for headers in (auth_headers(alice), auth_headers(bob)):
        log_search(client, "python", headers)
    log_search(client, "python django", auth_headers(alice))
    log_search(client, "golang")

    popular = client.get("/api/search-history/popular").json()["popularSearches"]
    assert [p["searchQuery"] for p in popular] == ["python"]
    assert popular[0]["totalSearches"] == 2
    assert popular[0]["uniqueUserCount"] == 2

    trending = client.get("/api/search-history/trending").json()["trendingSearches"]
    assert trending[0]["searchQuery"] == "python"
    assert {t["searchQuery"] for t in trending} == {"python", "python django", "golang"}

    suggestions = client.get("/api/search-history/suggestions", params={"query": "PYTHON"}).json()["suggestions"]
    assert suggestions == [{"suggestion": "python django", "count": 1}]
    assert client.get("/api/search-history/suggestions", params={"query": "p"}).json()["suggestions"] == []


def test_clear_history_only_touches_caller(client, make_user, auth_headers):
    alice, bob = make_user("candidate"), make_user("candidate")
    log_search(client, "rust", auth_headers(alice))
    log_search(client, "rust", auth_headers(bob))

    assert client.delete("/api/search-history/history", headers=auth_headers(alice)).status_code == 200
    assert client.get("/api/search-history/history", headers=auth_headers(alice)).json()["searchHistory"] == []
    assert len(client.get("/api/search-history/history", headers=auth_headers(bob)).json()["searchHistory"]) == 1


def test_history_requires_auth(client):
    assert client.get("/api/search-history/history").status_code == 401


# === Pipeline statuses ===

def test_defaults_are_seeded_and_locked(client, make_user, auth_headers):
    employer = make_user("employer")
    headers = auth_headers(employer)

    statuses = client.get("/api/statuses", headers=headers).json()["statuses"]
    assert [s["key"] for s in statuses] == ["pending", "reviewed", "shortlisted", "interview", "hired", "rejected"]
    assert all(s["isDefault"] for s in statuses)

    pending_id = statuses[0]["id"]
    assert client.put(f"/api/statuses/{pending_id}", json={"name": "Waiting"}, headers=headers).status_code == 403
    assert client.delete(f"/api/statuses/{pending_id}", headers=headers).status_code == 403


def test_custom_status_lifecycle(client, make_user, auth_headers):
    employer, other = make_user("employer"), make_user("employer")
    headers = auth_headers(employer)

    response = client.post("/api/statuses", json={"name": "Phone Screen"}, headers=headers)
    assert response.status_code == 201
    created = response.json()["status"]
    assert created["key"] == "phone-screen"
    assert created["isDefault"] is False

    assert client.post("/api/statuses", json={"name": "phone screen"}, headers=headers).status_code == 409
    assert client.post("/api/statuses", json={"name": "Hired"}, headers=headers).status_code == 409

    response = client.put(
        f"/api/statuses/{created['id']}", json={"name": "Tech Screen", "color": "bg-pink-100"}, headers=headers
    )
    assert response.json()["status"]["key"] == "tech-screen"

    response = client.put(
        "/api/statuses/reorder", json={"statuses": [{"id": created["id"], "order": 0}]}, headers=headers
    )
    assert response.status_code == 200
    keys = [s["key"] for s in client.get("/api/statuses", headers=headers).json()["statuses"]]
    assert keys[0] == "tech-screen"

    other_keys = [s["key"] for s in client.get("/api/statuses", headers=auth_headers(other)).json()["statuses"]]
    assert "tech-screen" not in other_keys
    assert client.delete(f"/api/statuses/{created['id']}", headers=auth_headers(other)).status_code == 404

    assert client.delete(f"/api/statuses/{created['id']}", headers=headers).status_code == 200
    keys = [s["key"] for s in client.get("/api/statuses", headers=headers).json()["statuses"]]
    assert "tech-screen" not in keys


def test_statuses_are_employer_only(client, make_user, auth_headers):
    candidate = make_user("candidate")
    assert client.get("/api/statuses", headers=auth_headers(candidate)).status_code == 403


def test_expired_token_is_rejected(client, make_user):
    user = make_user("candidate")
    token = issue_token(
        user.id, user.role, get_config().auth.secret,
        ttl=timedelta(minutes=5), now=utcnow() - timedelta(hours=1)
    )
    response = client.get("/api/search-history/history", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {
        "success": False, "message": "Not authorized, token failed", "type": "HTTPException"
    }

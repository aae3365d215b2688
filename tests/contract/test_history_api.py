"""
Contract tests for history API endpoints.

Tests cover:
- GET /api/history (newest first, pagination, case-insensitive search)
- GET /api/history/{id} (owner only, 404 otherwise)
"""

import pytest


@pytest.fixture
def asked(client, auth_headers):
    """Ask three questions and return their session ids, oldest first."""
    sessions = []
    for query in ("What is machine learning?", "Explain photosynthesis", "What is Machine Vision?"):
        response = client.post("/api/learning/query", headers=auth_headers, json={"query": query})
        assert response.status_code == 200
        sessions.append(response.json()["sessionId"])
    return sessions


class TestHistoryListContract:
    def test_requires_token(self, client):
        assert client.get("/api/history").status_code == 401

    def test_empty_history(self, client, auth_headers):
        response = client.get("/api/history", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "history": [],
            "pagination": {"page": 1, "limit": 10, "total": 0, "pages": 0},
        }

    def test_newest_first(self, client, auth_headers, asked):
        history = client.get("/api/history", headers=auth_headers).json()["history"]

        assert [entry["sessionId"] for entry in history] == list(reversed(asked))

    def test_pagination(self, client, auth_headers, asked):
        body = client.get("/api/history", headers=auth_headers, params={"page": 2, "limit": 2}).json()

        assert body["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
        assert [entry["sessionId"] for entry in body["history"]] == [asked[0]]

    def test_limit_is_clamped(self, client, auth_headers):
        body = client.get("/api/history", headers=auth_headers, params={"limit": 1000}).json()

        assert body["pagination"]["limit"] == 100

    def test_search_ignores_case(self, client, auth_headers, asked):
        body = client.get("/api/history", headers=auth_headers, params={"query": "PHOTOSYNTHESIS"}).json()

        assert body["pagination"]["total"] == 1
        assert body["history"][0]["query"] == "Explain photosynthesis"

    def test_search_treats_input_literally(self, client, auth_headers, asked):
        body = client.get("/api/history", headers=auth_headers, params={"query": ".*"}).json()

        assert body["pagination"]["total"] == 0

    def test_history_is_per_user(self, client, auth_headers, asked):
        token = client.post("/api/auth/register", json={
            "name": "Other Learner", "email": "other@learnsphere.dev", "password": "secret123",
        }).json()["token"]

        body = client.get("/api/history", headers={"Authorization": f"Bearer {token}"}).json()

        assert body["pagination"]["total"] == 0


class TestHistoryEntryContract:
    def test_get_entry(self, client, auth_headers, asked):
        entry = client.get("/api/history", headers=auth_headers).json()["history"][0]

        response = client.get(f"/api/history/{entry['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["sessionId"] == entry["sessionId"]
        assert response.json()["userId"] == entry["userId"]

    def test_missing_entry(self, client, auth_headers):
        response = client.get("/api/history/does-not-exist", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "History item not found"}

    def test_entry_of_other_user(self, client, auth_headers, asked):
        entry_id = client.get("/api/history", headers=auth_headers).json()["history"][0]["id"]
        token = client.post("/api/auth/register", json={
            "name": "Other Learner", "email": "other@learnsphere.dev", "password": "secret123",
        }).json()["token"]

        response = client.get(f"/api/history/{entry_id}", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 404

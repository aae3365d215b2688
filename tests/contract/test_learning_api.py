"""
Contract tests for learning API endpoints.

The Sonar client runs in mock mode (no API key), so answers come from the
canned responses.

Tests cover:
- POST /api/learning/query (answer shape, history entry, validation, cache)
- POST /api/learning/follow-up (session history is extended)
- POST /api/learning/path (saved as learning_path content)
- POST /api/learning/save and GET /api/learning/content[/{id}]
- Upstream failures (502 outside development, canned fallback in development)
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from learnsphere.src.main import create_app
from learnsphere.src.models.learning import LearningResponse
from learnsphere.src.services.sonar_client import SonarAPIError


def stamped(body) -> datetime:
    return datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def ask(client, headers, query="What is machine learning?", **options):
    body = {"query": query}
    if options:
        body["options"] = options
    return client.post("/api/learning/query", headers=headers, json=body)


# ============================================================================
# QUERIES
# ============================================================================


class TestQueryContract:
    def test_requires_token(self, client):
        response = client.post("/api/learning/query", json={"query": "What is machine learning?"})

        assert response.status_code == 401

    def test_answer_shape(self, client, auth_headers):
        response = ask(client, auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["content"].startswith("# Machine Learning")
        assert len(body["citations"]) > 0
        assert {"title", "url"} <= set(body["citations"][0])
        assert len(body["followUpQuestions"]) > 0
        assert len(body["sessionId"]) == 32
        assert body["timestamp"]

    def test_query_is_recorded_in_history(self, client, auth_headers):
        answer = ask(client, auth_headers, level="beginner").json()

        history = client.get("/api/history", headers=auth_headers).json()

        assert history["pagination"]["total"] == 1
        entry = history["history"][0]
        assert entry["query"] == "What is machine learning?"
        assert entry["sessionId"] == answer["sessionId"]
        assert entry["response"] == answer["content"]
        assert entry["learningContext"]["level"] == "beginner"
        assert entry["followUps"] == []

    def test_each_query_gets_a_new_session(self, client, auth_headers):
        first = ask(client, auth_headers).json()
        second = ask(client, auth_headers).json()

        assert first["sessionId"] != second["sessionId"]
        assert first["content"] == second["content"]

    def test_answers_are_cached(self, client, auth_headers):
        ask(client, auth_headers)
        ask(client, auth_headers)

        cache = client.app.state.response_cache
        assert cache.metrics.hits == 1
        assert len(cache) == 1

    def test_cached_answer_is_stamped_when_served(self, client, auth_headers):
        first = ask(client, auth_headers).json()
        second = ask(client, auth_headers).json()

        assert second["content"] == first["content"]
        assert stamped(second) > stamped(first)

    def test_query_is_trimmed(self, client, auth_headers):
        ask(client, auth_headers, query="   What is machine learning?  ")

        entry = client.get("/api/history", headers=auth_headers).json()["history"][0]
        assert entry["query"] == "What is machine learning?"

    @pytest.mark.parametrize("body", [
        {"query": ""},
        {"query": "    "},
        {"query": "x" * 2001},
        {"query": "Valid", "options": {"level": "expert"}},
        {},
    ])
    def test_invalid_query(self, client, auth_headers, body):
        response = client.post("/api/learning/query", headers=auth_headers, json=body)

        assert response.status_code == 422


# ============================================================================
# FOLLOW-UPS
# ============================================================================


class TestFollowUpContract:
    def test_follow_up_extends_session(self, client, auth_headers):
        answer = ask(client, auth_headers).json()

        response = client.post("/api/learning/follow-up", headers=auth_headers, json={
            "followUpQuery": "How does supervised learning work?",
            "sessionId": answer["sessionId"],
            "messages": [
                {"role": "user", "content": "What is machine learning?"},
                {"role": "assistant", "content": answer["content"]},
            ],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["content"]
        assert "sessionId" not in body

        entry = client.get("/api/history", headers=auth_headers).json()["history"][0]
        assert len(entry["followUps"]) == 1
        assert entry["followUps"][0]["query"] == "How does supervised learning work?"
        assert entry["followUps"][0]["response"] == body["content"]

    def test_follow_up_without_session(self, client, auth_headers):
        response = client.post("/api/learning/follow-up", headers=auth_headers, json={
            "followUpQuery": "And then?",
        })

        assert response.status_code == 200

    def test_unknown_session_is_ignored(self, client, auth_headers):
        response = client.post("/api/learning/follow-up", headers=auth_headers, json={
            "followUpQuery": "And then?",
            "sessionId": "does-not-exist",
        })

        assert response.status_code == 200

    def test_invalid_message_role(self, client, auth_headers):
        response = client.post("/api/learning/follow-up", headers=auth_headers, json={
            "followUpQuery": "And then?",
            "messages": [{"role": "narrator", "content": "..."}],
        })

        assert response.status_code == 422


# ============================================================================
# LEARNING PATHS AND SAVED CONTENT
# ============================================================================


class TestLearningPathContract:
    def test_path_is_saved_as_content(self, client, auth_headers):
        response = client.post("/api/learning/path", headers=auth_headers, json={
            "topic": "Rust Programming",
            "level": "beginner",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["topic"] == "Rust Programming"
        assert body["level"] == "beginner"
        assert "Fundamentals of Rust Programming" in body["content"]
        assert body["followUpQuestions"] == []

        listing = client.get(
            "/api/learning/content", headers=auth_headers, params={"type": "learning_path"}
        ).json()
        assert listing["pagination"]["total"] == 1
        item = listing["content"][0]
        assert item["id"] == body["pathId"]
        assert item["title"] == "Learning Path: Rust Programming"
        assert item["metadata"]["level"] == "beginner"
        assert "content" not in item

        saved = client.get(f"/api/learning/content/{body['pathId']}", headers=auth_headers).json()
        assert saved["content"] == body["content"]
        assert saved["type"] == "learning_path"

    def test_blank_topic(self, client, auth_headers):
        response = client.post("/api/learning/path", headers=auth_headers, json={"topic": "  "})

        assert response.status_code == 422


class TestSavedContentContract:
    def test_save_and_fetch(self, client, auth_headers):
        response = client.post("/api/learning/save", headers=auth_headers, json={
            "title": "Gradient descent notes",
            "content": "Step against the gradient.",
            "metadata": {"source": "lecture 3"},
        })

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Content saved successfully"

        saved = client.get(f"/api/learning/content/{body['contentId']}", headers=auth_headers).json()
        assert saved["title"] == "Gradient descent notes"
        assert saved["type"] == "note"
        assert saved["metadata"] == {"source": "lecture 3"}
        assert saved["isPublic"] is False

    def test_type_filter_and_pagination(self, client, auth_headers):
        for i in range(3):
            client.post("/api/learning/save", headers=auth_headers, json={
                "title": f"Note {i}", "content": "body",
            })
        client.post("/api/learning/save", headers=auth_headers, json={
            "title": "Quiz", "content": "Q1", "type": "quiz",
        })

        notes = client.get(
            "/api/learning/content", headers=auth_headers, params={"type": "note", "limit": 2}
        ).json()

        assert len(notes["content"]) == 2
        assert notes["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
        assert {item["type"] for item in notes["content"]} == {"note"}

        everything = client.get("/api/learning/content", headers=auth_headers).json()
        assert everything["pagination"]["total"] == 4

    def test_unknown_content_type(self, client, auth_headers):
        response = client.get("/api/learning/content", headers=auth_headers, params={"type": "video"})

        assert response.status_code == 422

    def test_missing_content(self, client, auth_headers):
        response = client.get("/api/learning/content/does-not-exist", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Content not found"}

    def test_content_of_other_user(self, client, auth_headers):
        content_id = client.post("/api/learning/save", headers=auth_headers, json={
            "title": "Private", "content": "mine",
        }).json()["contentId"]

        other = client.post("/api/auth/register", json={
            "name": "Other Learner", "email": "other@learnsphere.dev", "password": "secret123",
        }).json()["token"]

        response = client.get(
            f"/api/learning/content/{content_id}", headers={"Authorization": f"Bearer {other}"}
        )

        assert response.status_code == 404


# ============================================================================
# UPSTREAM FAILURES
# ============================================================================


def failing_client(settings, environment):
    configured = settings.model_copy(update={"sonar_api_key": "pplx-live-key", "environment": environment})
    return TestClient(create_app(configured))


def register(client) -> dict:
    token = client.post("/api/auth/register", json={
        "name": "Learner", "email": "learner@learnsphere.dev", "password": "secret123",
    }).json()["token"]
    return {"Authorization": f"Bearer {token}"}


class TestUpstreamFailures:
    def test_sonar_failure_is_bad_gateway(self, settings):
        with failing_client(settings, "test") as client:
            client.app.state.learning_service.sonar_client.ask = AsyncMock(
                side_effect=SonarAPIError(503, "overloaded")
            )
            response = ask(client, register(client))

        assert response.status_code == 502
        assert response.json()["detail"].startswith("Failed to get response from Perplexity")

    def test_development_falls_back_to_canned_answer(self, settings):
        with failing_client(settings, "development") as client:
            client.app.state.learning_service.sonar_client.ask = AsyncMock(
                side_effect=SonarAPIError(503, "overloaded")
            )
            response = ask(client, register(client))

        assert response.status_code == 200
        assert response.json()["content"].startswith("# Machine Learning")

    def test_live_answer_is_used(self, settings):
        with failing_client(settings, "test") as client:
            client.app.state.learning_service.sonar_client.ask = AsyncMock(
                return_value=LearningResponse(content="Live answer", follow_up_questions=["Next?"])
            )
            response = ask(client, register(client))

        assert response.status_code == 200
        assert response.json()["content"] == "Live answer"
        assert response.json()["followUpQuestions"] == ["Next?"]

    def test_fallback_answer_is_not_cached(self, settings):
        with failing_client(settings, "development") as client:
            client.app.state.learning_service.sonar_client.ask = AsyncMock(side_effect=[
                SonarAPIError(503, "overloaded"),
                LearningResponse(content="Live answer"),
            ])
            headers = register(client)
            fallback = ask(client, headers)
            recovered = ask(client, headers)

        assert fallback.json()["content"].startswith("# Machine Learning")
        assert recovered.json()["content"] == "Live answer"

    def test_fallback_learning_path_is_not_cached(self, settings):
        with failing_client(settings, "development") as client:
            client.app.state.learning_service.sonar_client.generate_learning_path = AsyncMock(side_effect=[
                SonarAPIError(503, "overloaded"),
                LearningResponse(content="Live path"),
            ])
            headers = register(client)
            fallback = client.post("/api/learning/path", headers=headers, json={"topic": "Graph Theory"})
            recovered = client.post("/api/learning/path", headers=headers, json={"topic": "Graph Theory"})

        assert "Fundamentals of Graph Theory" in fallback.json()["content"]
        assert recovered.json()["content"] == "Live path"

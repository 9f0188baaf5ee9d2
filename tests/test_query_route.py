"""
Tests for the HTTP routes.

The application runs in free-tier mode against an in-memory store, so every
answer comes from the heuristic engine.
"""

import pytest
from fastapi.testclient import TestClient

from clientqa.app import create_app

ENVELOPE_FIELDS = {"query", "user", "clientCount", "answer", "modelUsed", "error"}


@pytest.fixture
def test_client():
    """Create a test client with the application lifespan running."""
    with TestClient(create_app()) as client:
        yield client


class TestHealthRoutes:
    """Health and model connectivity checks."""

    def test_health(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["mode"] == "Free Tier (Heuristic Engine)"

    def test_test_model_in_free_tier(self, test_client):
        response = test_client.get("/api/test-model")

        assert response.status_code == 200
        assert response.json()["mode"] == "Free Tier"

    def test_unknown_route(self, test_client):
        response = test_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route not found"}


class TestDataRoutes:
    """User and client listings."""

    def test_users(self, test_client):
        response = test_client.get("/api/users")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [u["name"] for u in body["data"]] == ["User 1", "User 2", "User 3", "User 4", "User 5"]

    def test_clients_are_masked(self, test_client):
        response = test_client.get("/api/clients/1")

        assert response.status_code == 200
        clients = response.json()["data"]
        assert len(clients) == 6
        assert clients[0]["name"] == "Client 1"
        assert clients[0]["phone"] == "+91 12xxxxxx90"
        assert clients[0]["email"] == "clxxxx@company.com"

    def test_clients_for_unknown_user(self, test_client):
        response = test_client.get("/api/clients/99")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "User not found"}

    def test_search_clients(self, test_client):
        response = test_client.get("/api/clients/1/search", params={"term": "Company 1"})

        assert response.status_code == 200
        clients = response.json()["data"]
        assert [c["name"] for c in clients] == ["Client 1", "Client 13", "Client 16", "Client 19"]
        assert all(c["phone"] == "+91 12xxxxxx90" for c in clients)

    def test_search_stays_in_scope(self, test_client):
        response = test_client.get("/api/clients/1/search", params={"term": "Company 2"})

        assert response.json() == {"success": True, "data": []}

    def test_search_for_unknown_user(self, test_client):
        response = test_client.get("/api/clients/99/search", params={"term": "Company"})

        assert response.status_code == 404


class TestQueryRoute:
    """Query answering."""

    def test_answers_query(self, test_client):
        response = test_client.post("/api/query", json={"query": "how many clients do I have?", "userId": 4})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert set(body["data"]) == ENVELOPE_FIELDS
        assert body["data"]["user"] == "User 4"
        assert body["data"]["clientCount"] == 5
        assert body["data"]["modelUsed"] is False
        assert body["data"]["error"] is None
        assert body["data"]["answer"].startswith("You have access to 5 clients:")

    def test_unsafe_query(self, test_client):
        response = test_client.post("/api/query", json={"query": "DROP TABLE clients", "userId": 1})

        assert response.status_code == 200
        assert response.json()["data"]["answer"] == "INVALID"

    def test_scoping(self, test_client):
        """A user only ever hears about their own clients."""
        response = test_client.post("/api/query", json={"query": "what industry is company 1?", "userId": 3})

        answer = response.json()["data"]["answer"]
        assert answer.startswith("Company 1 is not in your accessible clients list.")

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_missing_query(self, test_client, query):
        response = test_client.post("/api/query", json={"query": query, "userId": 1})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Query is required and must be a string"}

    def test_non_string_query(self, test_client):
        response = test_client.post("/api/query", json={"query": 42, "userId": 1})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_missing_user(self, test_client):
        response = test_client.post("/api/query", json={"query": "list my clients"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "User ID is required"}

    def test_unknown_user(self, test_client):
        response = test_client.post("/api/query", json={"query": "list my clients", "userId": 99})

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

"""Tests for the health endpoint and the shared error format."""

from __future__ import annotations


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "service": "crisper-backend"}

    def test_docs_are_served(self, client):
        resp = client.get("/api/openapi.json")
        assert resp.status_code == 200
        assert resp.json()["info"]["title"] == "Crisper API Documentation"


class TestErrorFormat:
    def test_unknown_route(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Not Found"}

    def test_validation_error(self, client):
        resp = client.get("/api/users/not-a-number")
        assert resp.status_code == 422
        body = resp.json()
        assert body["message"] == "Invalid request data"
        assert "user_id" in body["info"]

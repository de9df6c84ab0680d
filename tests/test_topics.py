"""Tests for topic listing."""

from __future__ import annotations

import asyncio

from crisper.services import topics as topic_service


def make_topics(client, headers, names):
    for name in names:
        client.post(
            "/api/posts",
            json={"title": name, "content": "...", "topics": name},
            headers=headers,
        )


class TestTopics:
    def test_empty(self, client):
        resp = client.get("/api/topics")
        assert resp.status_code == 200
        assert resp.json() == {"data": []}

    def test_sorted_by_name(self, client, alice):
        _, headers = alice
        make_topics(client, headers, ["Music", "Art", "Sport"])
        body = client.get("/api/topics", params={"sortBy": "name", "order": "asc"}).json()
        assert [t["name"] for t in body["data"]] == ["Art", "Music", "Sport"]
        assert "pagination" not in body

    def test_topic_reused(self, client, alice):
        _, headers = alice
        make_topics(client, headers, ["Art", "Art"])
        assert len(client.get("/api/topics").json()["data"]) == 1

    def test_paginated(self, client, alice):
        _, headers = alice
        make_topics(client, headers, ["A", "B", "C", "D", "E"])
        body = client.get(
            "/api/topics", params={"sortBy": "name", "order": "asc", "page": 3, "limit": 2}
        ).json()
        assert [t["name"] for t in body["data"]] == ["E"]
        assert body["pagination"] == {"page": 3, "limit": 2, "total": 5, "totalPages": 3}

    def test_invalid_sort(self, client):
        assert client.get("/api/topics", params={"sortBy": "title"}).status_code == 422


class TestPaginate:
    def test_without_limit(self):
        assert topic_service.paginate(1, None, 10) is None

    def test_rounds_up(self):
        assert topic_service.paginate(1, 3, 10)["total_pages"] == 4

    def test_no_rows(self):
        assert topic_service.paginate(1, 5, 0)["total_pages"] == 0

    def test_service_listing(self, db):
        assert asyncio.run(topic_service.list_topics()) == {"data": []}

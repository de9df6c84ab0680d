"""Tests for the user routes."""

from __future__ import annotations

from pathlib import Path

from conftest import PASSWORD, register

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestSignup:
    def test_signup(self, client):
        resp = client.post(
            "/api/users/signup",
            json={"name": "Alice", "email": "alice@example.com", "password": "abc123"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Signup successful"
        assert body["info"]["name"] == "Alice"
        assert body["info"]["email"] == "alice@example.com"
        assert isinstance(body["info"]["id"], int)

    def test_duplicate_email(self, client):
        register(client, "Alice", "alice@example.com")
        resp = client.post(
            "/api/users/signup",
            json={"name": "Other", "email": "alice@example.com", "password": "abc123"},
        )
        assert resp.status_code == 409
        assert "already in use" in resp.json()["message"]

    def test_password_rules(self, client):
        for bad in ("abc", "abcdef", "123456", "abc 123", "ab-12"):
            resp = client.post(
                "/api/users/signup",
                json={"name": "Alice", "email": "alice@example.com", "password": bad},
            )
            assert resp.status_code == 422, bad
            body = resp.json()
            assert body["message"] == "Invalid request data"
            assert "password" in body["info"]

    def test_invalid_email(self, client):
        resp = client.post(
            "/api/users/signup",
            json={"name": "Alice", "email": "not-an-email", "password": "abc123"},
        )
        assert resp.status_code == 422
        assert "email" in resp.json()["info"]


class TestSignin:
    def test_signin(self, client):
        user_id = register(client, "Alice", "alice@example.com")
        resp = client.post(
            "/api/users/signin",
            json={"email": "alice@example.com", "password": PASSWORD},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["token"]
        info = body["userInfo"]
        assert info["id"] == user_id
        assert info["avatar"] == "/s3/avatars/default.png"
        assert info["description"] == ""
        assert "createdAt" in info
        assert "password" not in info

    def test_wrong_password(self, client):
        register(client, "Alice", "alice@example.com")
        resp = client.post(
            "/api/users/signin",
            json={"email": "alice@example.com", "password": "wrong123"},
        )
        assert resp.status_code == 401
        body = resp.json()
        assert body["userInfo"] is None
        assert body["token"] is None

    def test_unknown_email(self, client):
        resp = client.post(
            "/api/users/signin",
            json={"email": "ghost@example.com", "password": "abc123"},
        )
        assert resp.status_code == 401


class TestListAndGet:
    def test_list_excludes_password(self, client):
        register(client, "Alice", "alice@example.com")
        resp = client.get("/api/users")
        assert resp.status_code == 200
        users = resp.json()
        assert len(users) == 1
        assert "password" not in users[0]
        assert {"createdAt", "updateAt"} <= set(users[0])

    def test_search_is_case_insensitive(self, client):
        register(client, "Alice", "alice@example.com")
        register(client, "Bob", "bob@example.com")
        register(client, "Malice", "malice@example.com")
        names = [u["name"] for u in client.get("/api/users", params={"search": "ALIC"}).json()]
        assert sorted(names) == ["Alice", "Malice"]

    def test_sort_and_limit(self, client):
        register(client, "Carol", "carol@example.com")
        register(client, "Alice", "alice@example.com")
        register(client, "Bob", "bob@example.com")

        resp = client.get("/api/users", params={"sortBy": "name", "order": "asc"})
        assert [u["name"] for u in resp.json()] == ["Alice", "Bob", "Carol"]

        resp = client.get("/api/users", params={"limit": 2})
        # newest first by default
        assert [u["name"] for u in resp.json()] == ["Bob", "Alice"]

    def test_invalid_sort_key(self, client):
        resp = client.get("/api/users", params={"sortBy": "password"})
        assert resp.status_code == 422

    def test_get_user(self, client):
        user_id = register(client, "Alice", "alice@example.com")
        resp = client.get(f"/api/users/{user_id}")
        assert resp.status_code == 200
        assert resp.json()["email"] == "alice@example.com"

    def test_get_missing_user(self, client):
        resp = client.get("/api/users/999")
        assert resp.status_code == 404
        assert resp.json() == {"message": "User not found"}


class TestAuthenticatedActions:
    def test_requires_token(self, client):
        resp = client.delete("/api/users")
        assert resp.status_code == 401
        assert resp.json() == {"message": "Unauthorized request"}

    def test_bare_token_accepted(self, client, alice):
        _, headers = alice
        token = headers["Authorization"].split(" ", 1)[1]
        resp = client.patch(
            "/api/users/avatar",
            files={"image": ("me.png", PNG, "image/png")},
            headers={"Authorization": token},
        )
        assert resp.status_code == 200

    def test_avatar_upload(self, client, alice, crisper_env):
        user_id, headers = alice
        resp = client.patch(
            "/api/users/avatar",
            files={"image": ("me.png", PNG, "image/png")},
            headers=headers,
        )
        assert resp.status_code == 200
        url = resp.json()["avatarUrl"]
        assert url == f"/s3/avatars/{user_id}.png"
        assert (Path(crisper_env) / "data" / "avatars" / f"{user_id}.png").read_bytes() == PNG

        assert client.get(f"/api/users/{user_id}").json()["avatar"] == url
        served = client.get(url)
        assert served.status_code == 200
        assert served.content == PNG

    def test_avatar_rejects_non_images(self, client, alice):
        _, headers = alice
        resp = client.patch(
            "/api/users/avatar",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )
        assert resp.status_code == 422

    def test_avatar_requires_extension(self, client, alice):
        _, headers = alice
        resp = client.patch(
            "/api/users/avatar",
            files={"image": ("avatar", PNG, "image/png")},
            headers=headers,
        )
        assert resp.status_code == 422
        assert "extension" in resp.json()["message"]

    def test_avatar_extension_cannot_hold_a_path(self, client, alice, crisper_env):
        _, headers = alice
        resp = client.patch(
            "/api/users/avatar",
            files={"image": ("me.png/../../x", PNG, "image/png")},
            headers=headers,
        )
        assert resp.status_code == 422
        assert not (Path(crisper_env) / "x").exists()

    def test_default_avatar_is_served(self, client):
        resp = client.get("/s3/avatars/default.png")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "image/png"

    def test_delete_account_cascades(self, client, alice, bob):
        alice_id, alice_headers = alice
        _, bob_headers = bob

        post_id = client.post(
            "/api/posts", json={"title": "Hi", "content": "First"}, headers=alice_headers
        ).json()["post"]["id"]
        bob_post = client.post(
            "/api/posts", json={"title": "Bob", "content": "Mine"}, headers=bob_headers
        ).json()["post"]["id"]
        client.post("/api/posts/likes/%d" % post_id, json={"liked": True}, headers=bob_headers)
        client.post("/api/posts/likes/%d" % bob_post, json={"liked": True}, headers=alice_headers)
        client.post(
            "/api/post/reply", json={"postId": bob_post, "content": "nice"}, headers=alice_headers
        )

        resp = client.delete("/api/users", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Account deleted"}

        assert client.get(f"/api/users/{alice_id}").status_code == 404
        assert client.get(f"/api/posts/{post_id}").status_code == 404
        remaining = client.get(f"/api/posts/{bob_post}", params={"includeReplies": True}).json()
        assert remaining["likesCount"] == 0
        assert remaining["replies"] == []

        # the token of a deleted account no longer works
        assert client.delete("/api/users", headers=alice_headers).status_code == 401

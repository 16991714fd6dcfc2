"""
Tests for the users endpoints.
"""
from tests.conftest import create_blog, current_user_id, login, refresh_cookie, start

CURRENT = "/api/v1/users/current"


class TestCurrentUser:
    def test_get_current_user(self, client, reader):
        res = client.get(CURRENT, headers=reader["headers"])
        assert res.status_code == 200
        user = res.get_json()["data"]["user"]
        assert user["email"] == "reader@x.com"
        assert user["role"] == "user"
        assert "passwordHash" not in user
        assert "password_hash" not in user

    def test_update_profile(self, client, reader):
        res = client.put(CURRENT, headers=reader["headers"], json={
            "username": "  reader ",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "website": "https://ada.example.com",
        })
        assert res.status_code == 200
        user = res.get_json()["data"]["user"]
        assert user["username"] == "reader"
        assert user["firstName"] == "Ada"
        assert user["lastName"] == "Lovelace"
        assert user["socialLinks"] == {"website": "https://ada.example.com"}

    def test_social_links_are_merged(self, client, reader):
        client.put(CURRENT, headers=reader["headers"], json={"website": "https://ada.example.com"})
        res = client.put(CURRENT, headers=reader["headers"], json={"x": "https://x.com/ada"})
        assert res.get_json()["data"]["user"]["socialLinks"] == {
            "website": "https://ada.example.com",
            "x": "https://x.com/ada",
        }

    def test_invalid_url(self, client, reader):
        res = client.put(CURRENT, headers=reader["headers"], json={"website": "not a url"})
        assert res.status_code == 400
        assert "website" in res.get_json()["error"]

    def test_username_too_long(self, client, reader):
        res = client.put(CURRENT, headers=reader["headers"], json={"username": "x" * 21})
        assert res.status_code == 400
        assert "username" in res.get_json()["error"]

    def test_username_conflict(self, client, reader, other_reader):
        client.put(CURRENT, headers=other_reader["headers"], json={"username": "taken"})
        res = client.put(CURRENT, headers=reader["headers"], json={"username": "taken"})
        assert res.status_code == 400
        assert res.get_json()["error"] == {"username": ["The username is already in use"]}

    def test_email_conflict(self, client, reader, other_reader):
        res = client.put(CURRENT, headers=reader["headers"], json={"email": "other@x.com"})
        assert res.status_code == 400
        assert res.get_json()["error"] == {"email": ["The email is already in use"]}

    def test_keeping_own_email_is_not_a_conflict(self, client, reader):
        res = client.put(CURRENT, headers=reader["headers"], json={"email": "reader@x.com"})
        assert res.status_code == 200

    def test_password_change(self, app, client, reader):
        res = client.put(CURRENT, headers=reader["headers"], json={"password": "new-password"})
        assert res.status_code == 200
        other = app.test_client()
        assert login(other, "reader@x.com", "password1").status_code == 401
        assert login(other, "reader@x.com", "new-password").status_code == 201

    def test_delete_current_user(self, app, reader):
        c = reader["client"]
        res = c.delete(CURRENT, headers=reader["headers"])
        assert res.status_code == 204
        assert refresh_cookie(c) is None

        assert login(app.test_client(), "reader@x.com").status_code == 401
        c.set_cookie("refreshToken", reader["refresh"])
        assert c.post("/api/v1/auth/refresh-token").status_code == 401


class TestAdminUsers:
    def test_list_users(self, client, admin, reader, other_reader):
        res = client.get("/api/v1/users", headers=admin["headers"])
        assert res.status_code == 200
        data = res.get_json()["data"]
        assert data["total"] == 3
        assert data["limit"] == 20
        assert data["offset"] == 0
        assert len(data["users"]) == 3

    def test_list_users_paginates(self, client, admin, reader, other_reader):
        res = client.get("/api/v1/users?limit=1&offset=1", headers=admin["headers"])
        data = res.get_json()["data"]
        assert data["total"] == 3
        assert len(data["users"]) == 1

    def test_list_users_limit_too_high(self, client, admin):
        res = client.get("/api/v1/users?limit=51", headers=admin["headers"])
        assert res.status_code == 400
        assert "limit" in res.get_json()["error"]

    def test_get_user_by_id(self, client, admin, reader):
        reader_id = current_user_id(reader)
        res = client.get(f"/api/v1/users/{reader_id}", headers=admin["headers"])
        assert res.status_code == 200
        assert res.get_json()["data"]["user"]["id"] == reader_id

    def test_get_user_invalid_id(self, client, admin):
        res = client.get("/api/v1/users/not-a-uuid", headers=admin["headers"])
        assert res.status_code == 400
        assert res.get_json()["error"] == {"userId": ["Invalid user ID"]}

    def test_get_user_not_found(self, client, admin):
        res = client.get("/api/v1/users/00000000-0000-0000-0000-000000000000", headers=admin["headers"])
        assert res.status_code == 404

    def test_delete_user_fixes_counters_on_other_blogs(self, app, client, admin, reader):
        blog = create_blog(admin, status="published")
        client.post(f"/api/v1/likes/blog/{blog['id']}", headers=reader["headers"])
        client.post(f"/api/v1/comments/blog/{blog['id']}", headers=reader["headers"], json={"content": "one"})
        client.post(f"/api/v1/comments/blog/{blog['id']}", headers=reader["headers"], json={"content": "two"})

        res = client.delete(f"/api/v1/users/{current_user_id(reader)}", headers=admin["headers"])
        assert res.status_code == 204

        after = client.get(f"/api/v1/blogs/{blog['slug']}", headers=admin["headers"]).get_json()["data"]["blog"]
        assert after["likesCount"] == 0
        assert after["commentsCount"] == 0
        comments = client.get(f"/api/v1/comments/blog/{blog['id']}", headers=admin["headers"])
        assert comments.get_json()["data"]["comments"] == []

    def test_delete_admin_removes_their_blogs(self, app, client, admin):
        chief = start(app, "chief@x.com", role="admin")
        blog = create_blog(chief)

        res = client.delete(f"/api/v1/users/{current_user_id(chief)}", headers=admin["headers"])
        assert res.status_code == 204
        assert client.get(f"/api/v1/blogs/{blog['slug']}", headers=admin["headers"]).status_code == 404

"""
Test configuration and fixtures.

Every test gets its own app (fresh in-memory SQLite) from the factory.
"""
from __future__ import annotations

import pytest

from blog_api import create_app
from models import storage

PASSWORD = "password1"
ADMIN_EMAIL = "admin@x.com"


@pytest.fixture
def app():
    app = create_app("testing", WHITELIST_ADMINS_MAIL=[ADMIN_EMAIL, "chief@x.com"])
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie(client) -> str | None:
    cookie = client.get_cookie("refreshToken")
    return cookie.value if cookie else None


def register(client, email: str, password: str = PASSWORD, role: str | None = None):
    body = {"email": email, "password": password}
    if role:
        body["role"] = role
    return client.post("/api/v1/auth/register", json=body)


def login(client, email: str, password: str = PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def start(app, email: str, role: str | None = None) -> dict:
    """Register on a dedicated client; returns client, tokens and user summary."""
    c = app.test_client()
    res = register(c, email, role=role)
    assert res.status_code == 201, res.get_json()
    data = res.get_json()["data"]
    return {
        "client": c,
        "access": data["accessToken"],
        "refresh": refresh_cookie(c),
        "user": data["user"],
        "headers": auth_header(data["accessToken"]),
    }


def current_user_id(session: dict) -> str:
    res = session["client"].get("/api/v1/users/current", headers=session["headers"])
    return res.get_json()["data"]["user"]["id"]


@pytest.fixture
def admin(app):
    return start(app, ADMIN_EMAIL, role="admin")


@pytest.fixture
def reader(app):
    return start(app, "reader@x.com")


@pytest.fixture
def other_reader(app):
    return start(app, "other@x.com")


def create_blog(session: dict, title="Hello World", content="Body text", status=None):
    body = {"title": title, "content": content}
    if status:
        body["status"] = status
    res = session["client"].post("/api/v1/blogs", json=body, headers=session["headers"])
    assert res.status_code == 201, res.get_json()
    return res.get_json()["data"]["blog"]

"""
Tests for the app shell: health routes, response envelope, error handlers,
rate limiting and small helpers.
"""
import re

import pytest

from blog_api import create_app
from blog_api.config import DevelopmentConfig, ProductionConfig, TestingConfig, get_config
from blog_api.errors import NotFound, PermissionDenied
from blog_api.response import STATUS, response
from models import storage
from utils.generators import gen_username, generate_slug
from utils.rate_limit import RateLimiter


class TestHealth:
    def test_root(self, client):
        res = client.get("/api/v1/")
        assert res.status_code == 200
        body = res.get_json()
        assert body["success"] is True
        assert body["data"]["status"] == "ok"
        assert body["data"]["version"] == "1.0.0"
        assert body["data"]["timestamp"]

    def test_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok", "version": "1.0.0"}


class TestEnvelope:
    def test_success_body(self, app):
        with app.app_context():
            body, status = response(STATUS.OK, {"code": "success", "message": "ok", "data": {"a": 1}})
        assert status == 200
        assert body.get_json() == {"success": True, "code": "success", "message": "ok", "data": {"a": 1}}

    def test_error_message_defaults_to_code(self, app):
        with app.app_context():
            body, status = response(STATUS.BAD_REQUEST)
        assert status == 400
        assert body.get_json() == {"success": False, "code": "BAD_REQUEST", "message": "BAD_REQUEST"}

    def test_extra_becomes_error_or_detail(self, app):
        with app.app_context():
            with_error, _ = response(STATUS.BAD_REQUEST, "bad", {"field": ["wrong"]})
            with_detail, _ = response(STATUS.INTERNAL_SERVER_ERROR, "boom", "KeyError")
        assert with_error.get_json()["error"] == {"field": ["wrong"]}
        assert with_detail.get_json()["detail"] == "KeyError"

    def test_no_content(self):
        assert response(STATUS.NO_CONTENT) == ("", 204)

    def test_status_lookup(self):
        assert STATUS.from_code(429) is STATUS.TOO_MANY_REQUESTS
        assert STATUS.from_code(418).status == 418

    def test_api_error_payload(self):
        err = PermissionDenied("nope", status=STATUS.FORBIDDEN, error={"role": ["admin"]})
        assert err.status.status == 403
        assert err.to_payload() == {
            "code": "permission_denied",
            "message": "nope",
            "type": "authorization_error",
            "error": {"role": ["admin"]},
        }
        assert NotFound().message == "We could not find the requested resource."


class TestErrorHandlers:
    def test_unknown_route(self, client):
        res = client.get("/api/v1/nothing-here")
        assert res.status_code == 404
        body = res.get_json()
        assert body["success"] is False
        assert body["code"] == "not_found"

    def test_wrong_method(self, client):
        res = client.delete("/api/v1/auth/login")
        assert res.status_code == 405
        assert res.get_json()["code"] == "method_not_allowed"

    def test_payload_too_large(self):
        app = create_app("testing", MAX_CONTENT_LENGTH=64)
        try:
            res = app.test_client().post(
                "/api/v1/auth/register", json={"email": "a@x.com", "password": "p" * 200}
            )
            assert res.status_code == 413
            assert res.get_json()["code"] == "validation_failed"
        finally:
            storage.close()


class TestRateLimiting:
    def test_limiter_window(self):
        limiter = RateLimiter(window_seconds=60)
        assert limiter.hit("1.2.3.4", 2, now=0)
        assert limiter.hit("1.2.3.4", 2, now=10)
        assert not limiter.hit("1.2.3.4", 2, now=20)
        assert limiter.hit("5.6.7.8", 2, now=20)
        assert limiter.hit("1.2.3.4", 2, now=61)

    def test_limiter_reset(self):
        limiter = RateLimiter()
        limiter.hit("a", 1, now=0)
        limiter.reset("a")
        assert limiter.hit("a", 1, now=0)

    def test_requests_over_the_limit_get_429(self):
        app = create_app("testing", RATELIMIT_ENABLED=True, RATELIMIT_PER_MINUTE=2)
        try:
            client = app.test_client()
            assert client.get("/api/v1/health").status_code == 200
            assert client.get("/api/v1/health").status_code == 200
            res = client.get("/api/v1/health")
            assert res.status_code == 429
            assert res.get_json()["code"] == "rate_limited"
        finally:
            storage.close()

    def test_disabled_in_testing(self, client):
        for _ in range(100):
            assert client.get("/api/v1/health").status_code == 200


class TestGenerators:
    def test_username_fits_column(self):
        name = gen_username()
        assert re.fullmatch(r"user-[a-z0-9]{10}", name)
        assert len(name) <= 20

    def test_slug(self):
        assert re.fullmatch(r"hello-world-[a-z0-9]{10}", generate_slug("  Hello,   World!! "))

    def test_slug_without_usable_characters(self):
        assert re.fullmatch(r"[a-z0-9]{10}", generate_slug("!!!"))


class TestConfig:
    @pytest.mark.parametrize("name, expected", [
        ("prod", ProductionConfig),
        ("production", ProductionConfig),
        ("test", TestingConfig),
        ("testing", TestingConfig),
        ("dev", DevelopmentConfig),
        ("anything", DevelopmentConfig),
    ])
    def test_get_config(self, name, expected):
        assert get_config(name) is expected

    def test_overrides_win(self):
        app = create_app("testing", DEFAULT_RES_LIMIT=5)
        try:
            assert app.config["DEFAULT_RES_LIMIT"] == 5
            assert app.config["TESTING"] is True
        finally:
            storage.close()

    def test_equal_token_secrets_refuse_to_start(self):
        with pytest.raises(ValueError):
            create_app("testing", JWT_ACCESS_SECRET="same-0123456789abcdef0123456789", JWT_REFRESH_SECRET="same-0123456789abcdef0123456789")

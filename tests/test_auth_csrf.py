"""
Tests - CSRF token check and API key authentication.

The testing config ships with both checks switched off; each test here
switches the relevant one on through monkeypatch so the session-scoped app
is restored afterwards.
"""

import pytest


@pytest.fixture()
def csrf_on(app, monkeypatch):
    monkeypatch.setitem(app.config, "CSRF_ENABLED", True)


@pytest.fixture()
def auth_on(app, monkeypatch):
    monkeypatch.delenv("API_AUTH_ENABLED", raising=False)
    monkeypatch.delenv("API_KEYS", raising=False)
    monkeypatch.setitem(app.config, "API_AUTH_ENABLED", "true")
    monkeypatch.setitem(app.config, "API_KEYS", "admin-key:admin,viewer-key:viewer")


def _token(client):
    res = client.get("/api/csrf-token")
    assert res.status_code == 200
    return res.get_json()["CSRFToken"]


class TestCsrf:
    def test_token_is_stable_per_session(self, client):
        assert _token(client) == _token(client)

    def test_post_without_token_rejected(self, client, csrf_on):
        res = client.post("/api/workflow/new", data={"description": "X"})
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_CSRF"
        assert client.get("/api/workflow").get_json() == []

    def test_post_with_wrong_token_rejected(self, client, csrf_on):
        _token(client)
        res = client.post("/api/workflow/new", data={"description": "X", "CSRFToken": "nope"})
        assert res.status_code == 403

    def test_post_with_form_token(self, client, csrf_on):
        token = _token(client)
        res = client.post("/api/workflow/new", data={"description": "X", "CSRFToken": token})
        assert res.status_code == 200

    def test_delete_with_query_token(self, client, workflow, csrf_on):
        token = _token(client)
        res = client.delete(f"/api/workflow/{workflow}?CSRFToken={token}")
        assert res.get_json() == "1"

    def test_header_token(self, client, csrf_on):
        token = _token(client)
        res = client.post("/api/workflow/dependencies", data={"description": "Budget"},
                          headers={"X-CSRF-Token": token})
        assert res.status_code == 200

    def test_reads_need_no_token(self, client, csrf_on):
        assert client.get("/api/workflow/dependencies").status_code == 200


class TestApiKeyAuth:
    def test_missing_key(self, client, auth_on):
        res = client.get("/api/workflow")
        assert res.status_code == 401

    def test_invalid_key(self, client, auth_on):
        res = client.get("/api/workflow", headers={"X-API-Key": "wrong"})
        assert res.status_code == 401

    def test_viewer_can_read(self, client, auth_on):
        res = client.get("/api/workflow", headers={"X-API-Key": "viewer-key"})
        assert res.status_code == 200

    def test_viewer_cannot_write(self, client, auth_on):
        res = client.post("/api/workflow/new", data={"description": "X"},
                          headers={"X-API-Key": "viewer-key"})
        assert res.status_code == 403
        assert res.get_json()["code"] == "ERR_FORBIDDEN"

    def test_admin_can_write(self, client, auth_on):
        res = client.post("/api/workflow/new", data={"description": "X"},
                          headers={"X-API-Key": "admin-key"})
        assert res.status_code == 200

    def test_same_origin_editor_is_trusted_when_enabled(self, app, client, auth_on, monkeypatch):
        monkeypatch.setitem(app.config, "TRUST_SAME_ORIGIN", True)
        res = client.post("/api/workflow/new", data={"description": "X"},
                          headers={"Sec-Fetch-Site": "same-origin"})
        assert res.status_code == 200

    def test_same_origin_headers_ignored_by_default(self, client, auth_on):
        res = client.post("/api/workflow/new", data={"description": "X"},
                          headers={"Sec-Fetch-Site": "same-origin"})
        assert res.status_code == 401
        res = client.post("/api/workflow/new", data={"description": "X"},
                          headers={"Referer": "http://localhost/editor"})
        assert res.status_code == 401
        assert client.get("/api/workflow", headers={"X-API-Key": "admin-key"}).get_json() == []

    def test_health_is_public(self, client, auth_on):
        assert client.get("/api/health/ready").status_code == 200

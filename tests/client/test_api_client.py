from __future__ import annotations

import pytest
import requests

from fakes import ScriptedAdapter
from workforce_portal.client import ApiClient, ApiError, SessionExpired
from workforce_portal.client.http import is_public_path, login_redirect_url

BASE = "http://api.test"
UNAUTHORIZED = {"success": False, "message": "Authentication required", "requiresLogin": True}


def _client(adapter, current_path="/dashboard/settings"):
    session = requests.Session()
    session.mount(BASE, adapter)
    return ApiClient(BASE, session=session, current_path=current_path)


def test_returns_envelope_on_success():
    adapter = ScriptedAdapter((200, {"success": True, "data": {"id": 7}, "message": "ok"}))

    body = _client(adapter).get("/api/employees/7")

    assert body["data"] == {"id": 7}
    assert adapter.calls == [("GET", "/api/employees/7")]


def test_refreshes_once_and_replays():
    adapter = ScriptedAdapter(
        (401, UNAUTHORIZED),
        (200, {"success": True, "message": "Token refreshed"}),
        (200, {"success": True, "data": []}),
    )

    body = _client(adapter).get("/api/employees")

    assert body["data"] == []
    assert adapter.calls == [
        ("GET", "/api/employees"),
        ("POST", "/api/auth/refresh"),
        ("GET", "/api/employees"),
    ]


def test_replayed_request_is_not_refreshed_again():
    adapter = ScriptedAdapter(
        (401, UNAUTHORIZED),
        (200, {"success": True}),
        (401, UNAUTHORIZED),
    )

    with pytest.raises(ApiError) as exc:
        _client(adapter).get("/api/employees")

    assert not isinstance(exc.value, SessionExpired)
    assert exc.value.status == 401
    assert len(adapter.calls) == 3


def test_failed_refresh_redirects_to_login_with_current_page():
    adapter = ScriptedAdapter((401, UNAUTHORIZED), (401, {"success": False, "message": "Invalid refresh token"}))
    client = _client(adapter)

    with pytest.raises(SessionExpired) as exc:
        client.get("/api/company/settings")

    assert exc.value.redirect_url == "/login?redirect=%2Fdashboard%2Fsettings"
    assert client.redirect_to == exc.value.redirect_url
    assert exc.value.payload == UNAUTHORIZED


def test_failed_refresh_on_a_login_page_sets_no_redirect():
    adapter = ScriptedAdapter((401, UNAUTHORIZED), (401, {"success": False, "message": "Invalid refresh token"}))
    client = _client(adapter, current_path="/dashboard/login-history")

    with pytest.raises(SessionExpired) as exc:
        client.get("/api/auth/me")

    assert exc.value.redirect_url is None
    assert client.redirect_to is None
    assert len(adapter.calls) == 2


def test_refresh_answering_success_false_counts_as_failure():
    adapter = ScriptedAdapter((401, UNAUTHORIZED), (200, {"success": False}))

    with pytest.raises(SessionExpired):
        _client(adapter).get("/api/employees")

    assert len(adapter.calls) == 2


def test_public_page_does_not_refresh():
    adapter = ScriptedAdapter((401, UNAUTHORIZED))
    client = _client(adapter, current_path="/pricing")

    with pytest.raises(ApiError) as exc:
        client.get("/api/auth/me")

    assert exc.value.status == 401
    assert client.redirect_to is None
    assert adapter.calls == [("GET", "/api/auth/me")]


def test_network_error_has_no_status():
    adapter = ScriptedAdapter(requests.ConnectionError("connection refused"))

    with pytest.raises(ApiError) as exc:
        _client(adapter).get("/api/employees")

    assert exc.value.status is None
    assert "Network error" in exc.value.message


def test_success_false_raises_with_payload():
    adapter = ScriptedAdapter((400, {"success": False, "message": "Cannot complete onboarding", "missing": ["plan"]}))

    with pytest.raises(ApiError) as exc:
        _client(adapter).post("/api/onboarding/complete", json={})

    assert exc.value.message == "Cannot complete onboarding"
    assert exc.value.payload["missing"] == ["plan"]


def test_login_redirect_escapes_query_string():
    assert login_redirect_url("/dashboard/employees?tab=active") == "/login?redirect=%2Fdashboard%2Femployees%3Ftab%3Dactive"


@pytest.mark.parametrize(
    "path, public",
    [
        ("/", True),
        ("/login", True),
        ("/reset-password/abc", True),
        ("/onboarding/logo", True),
        ("/auth/callback", True),
        ("/loginx", False),
        ("/dashboard", False),
    ],
)
def test_public_paths(path, public):
    assert is_public_path(path) is public

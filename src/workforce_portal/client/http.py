"""Cookie-session HTTP client for the workforce API.

Every response goes through :meth:`ApiClient._intercept`: a 401 on a protected
page triggers one silent ``/api/auth/refresh`` and a single replay of the
original request. If the refresh fails the client records a login redirect
that preserves the page the user was on.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from .errors import ApiError, SessionExpired

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh"
LOGIN_PATH = "/login"
# Marks left unescaped in the redirect parameter on top of quote()'s defaults.
_URI_COMPONENT_SAFE = "!~*'()"

PUBLIC_PATHS = (
    "/",
    "/login",
    "/signup",
    "/register",
    "/forgot-password",
    "/reset-password",
    "/privacy",
    "/terms",
    "/about",
    "/pricing",
    "/contact",
    "/accept-invitation",
)


def is_public_path(path: str) -> bool:
    if any(path == p or path.startswith(p + "/") for p in PUBLIC_PATHS):
        return True
    return path.startswith("/onboarding") or path.startswith("/auth/")


def login_redirect_url(current_path: str) -> str:
    return f"{LOGIN_PATH}?redirect={quote(current_path, safe=_URI_COMPONENT_SAFE)}"


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        current_path: str = "/",
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")
        self.timeout = timeout
        self.current_path = current_path
        self.redirect_to: Optional[str] = None

    def navigate(self, path: str) -> None:
        self.current_path = path

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        try:
            return self.session.request(method, self._url(path), **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"Network error: {exc}") from exc

    def request(self, method: str, path: str, **kwargs: Any) -> dict:
        """Send a request and return the decoded ``{success, data, message}`` envelope."""
        response = self._send(method, path, **kwargs)
        response = self._intercept(response, method, path, kwargs)
        return self._unwrap(response)

    def _intercept(self, response: requests.Response, method: str, path: str, kwargs: dict) -> requests.Response:
        if response.status_code != 401 or path == REFRESH_PATH:
            return response

        if is_public_path(self.current_path):
            logger.debug("401 on public page %s; not refreshing", self.current_path)
            return response

        if not self._refresh():
            redirect = None
            if LOGIN_PATH not in self.current_path:
                redirect = login_redirect_url(self.current_path)
                self.redirect_to = redirect
            logger.debug("Refresh failed; redirecting to %s", redirect)
            raise SessionExpired(redirect, payload=_decode(response))

        logger.debug("Session refreshed; replaying %s %s", method, path)
        return self._send(method, path, **kwargs)

    def _refresh(self) -> bool:
        try:
            response = self._send("POST", REFRESH_PATH, json={})
        except ApiError:
            return False
        if not response.ok:
            return False
        body = _decode(response)
        return not (isinstance(body, dict) and body.get("success") is False)

    def _unwrap(self, response: requests.Response) -> dict:
        body = _decode(response)
        envelope = body if isinstance(body, dict) else {"success": response.ok, "data": body}
        if not response.ok or envelope.get("success") is False:
            message = envelope.get("message") or envelope.get("error") or f"HTTP {response.status_code}"
            raise ApiError(message, status=response.status_code, payload=envelope)
        return envelope

    def get(self, path: str, **kwargs: Any) -> dict:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> dict:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> dict:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> dict:
        return self.request("DELETE", path, **kwargs)


def _decode(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None

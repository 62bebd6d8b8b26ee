from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """A failed API call.

    ``status`` is the HTTP status, or None when the server was never reached.
    ``payload`` is the decoded JSON envelope when one was returned.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def details(self) -> Any:
        if isinstance(self.payload, dict):
            return self.payload.get("details")
        return None


class SessionExpired(ApiError):
    """Refresh failed; the caller should navigate to ``redirect_url``."""

    def __init__(self, redirect_url: Optional[str], *, payload: Any = None):
        super().__init__("Session expired. Please log in again.", status=401, payload=payload)
        self.redirect_url = redirect_url


class StepValidationError(Exception):
    def __init__(self, step: int, missing: list[str]):
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.step = step
        self.missing = missing


class InvalidDocument(Exception):
    """A local file failed validation and was not sent."""

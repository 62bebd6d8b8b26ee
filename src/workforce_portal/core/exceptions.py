from __future__ import annotations

from typing import Any, Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    code: Optional[str] = None

    def __init__(self, message: str = "", *, code: Optional[str] = None, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = dict(details or {})


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or session tokens are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    status_code = 409


class PlanLimitError(AuthorizationError):
    """Raised when an action would exceed the company's declared employee limit."""

    code = "PLAN_LIMIT_REACHED"


class FeatureLockedError(AuthorizationError):
    code = "FEATURE_LOCKED"

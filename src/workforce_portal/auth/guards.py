"""Route decorators shared by every controller.

``g.current_user`` holds the :class:`CurrentUser` decoded from the access token.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable

from flask import g, request

from ..core.constants import ACCESS_COOKIE
from ..core.enums import Feature, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, FeatureLockedError
from .model import CurrentUser


def access_token_from_request() -> str:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return ""


def current_user() -> CurrentUser:
    user = getattr(g, "current_user", None)
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


@dataclass(frozen=True)
class Guards:
    login_required: Callable
    roles_required: Callable
    feature_required: Callable


def build_guards(container) -> Guards:
    tokens = container.token_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = tokens.current_user(access_token_from_request())
            return view(*args, **kwargs)

        return wrapper

    def roles_required(*roles: Role):
        allowed = frozenset(roles)

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                user = tokens.current_user(access_token_from_request())
                g.current_user = user
                if user.role not in allowed:
                    raise AuthorizationError("You do not have permission to perform this action")
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def feature_required(feature: Feature):
        """Apply after a login decorator so ``g.current_user`` is set."""

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                user = current_user()
                if not container.subscription_service.can_use(user.company_id, feature):
                    raise FeatureLockedError(
                        f"The {feature.value} feature is not available on your plan",
                        details={"feature": feature.value},
                    )
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return Guards(login_required=login_required, roles_required=roles_required, feature_required=feature_required)

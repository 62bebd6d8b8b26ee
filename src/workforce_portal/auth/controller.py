from __future__ import annotations

import logging

from flask import Flask, request

from ..common.responses import fail, json_body, ok
from ..core.constants import REFRESH_COOKIE
from ..core.exceptions import AuthenticationError
from .guards import build_guards, current_user

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    tokens = container.token_service
    auth = container.auth_service

    @app.post("/api/auth/register", endpoint="auth_register")
    def auth_register():
        payload = json_body()
        result = auth.register(
            email=payload.get("email"),
            password=payload.get("password"),
            first_name=payload.get("firstName"),
            last_name=payload.get("lastName"),
            company_name=payload.get("companyName"),
            industry=payload.get("industry"),
            timezone=payload.get("timezone"),
        )
        response, status = ok(
            {**result.to_dict(), "user": result.user.to_public_dict()},
            "Registration successful. Please verify your email.",
            201,
        )
        # The wizard continues straight after registration.
        tokens.set_session_cookies(response, tokens.issue_pair(result.user))
        return response, status

    @app.post("/api/auth/verify-email", endpoint="auth_verify_email")
    def auth_verify_email():
        payload = json_body()
        user = auth.verify_email(payload.get("email"), payload.get("code"))
        return ok({"emailVerified": user.email_verified}, "Email verified successfully")

    @app.post("/api/auth/resend-verification", endpoint="auth_resend_verification")
    def auth_resend_verification():
        payload = json_body()
        auth.resend_verification(payload.get("email"))
        return ok(None, "Verification code sent")

    @app.post("/api/auth/login", endpoint="auth_login")
    def auth_login():
        payload = json_body()
        user = auth.authenticate(payload.get("email"), payload.get("password"))
        response, status = ok({"user": user.to_public_dict()}, "Login successful")
        tokens.set_session_cookies(response, tokens.issue_pair(user))
        return response, status

    @app.post("/api/auth/refresh", endpoint="auth_refresh")
    def auth_refresh():
        try:
            user_id = tokens.refresh_user_id(request.cookies.get(REFRESH_COOKIE, ""))
            user = auth.active_user(user_id)
        except AuthenticationError as e:
            logger.debug("Refresh rejected: %s", e.message)
            response, status = fail(e.message, 401, requiresLogin=True)
            tokens.clear_session_cookies(response)
            return response, status

        response, status = ok({"user": user.to_public_dict()}, "Session refreshed")
        tokens.set_access_cookie(response, tokens.issue_access_token(user))
        return response, status

    @app.post("/api/auth/logout", endpoint="auth_logout")
    def auth_logout():
        response, status = ok(None, "Logged out successfully")
        tokens.clear_session_cookies(response)
        return response, status

    @app.get("/api/auth/me", endpoint="auth_me")
    @guards.login_required
    def auth_me():
        user = auth.get_profile(current_user().user_id)
        return ok(user.to_public_dict())

"""Signed session tokens carried in httpOnly cookies.

Access tokens are short-lived and carry the tenant (company_id) and role;
refresh tokens are long-lived and only identify the user.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import jwt

from ..common.datetime_utils import utcnow
from ..core.constants import ACCESS_COOKIE, ACCESS_TOKEN_MINUTES, REFRESH_COOKIE, REFRESH_TOKEN_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import CurrentUser, User

ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class CookieSettings:
    secure: bool = False
    domain: Optional[str] = None

    @property
    def samesite(self) -> str:
        # Cross-site SPA hosting needs SameSite=None, which browsers only accept with Secure.
        return "None" if self.secure else "Lax"


class TokenService:
    def __init__(
        self,
        secret: str,
        *,
        access_minutes: int = ACCESS_TOKEN_MINUTES,
        refresh_days: int = REFRESH_TOKEN_DAYS,
        cookies: CookieSettings | None = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._access_ttl = timedelta(minutes=access_minutes)
        self._refresh_ttl = timedelta(days=refresh_days)
        self.cookies = cookies or CookieSettings()

    @property
    def access_max_age(self) -> int:
        return int(self._access_ttl.total_seconds())

    @property
    def refresh_max_age(self) -> int:
        return int(self._refresh_ttl.total_seconds())

    def issue_access_token(self, user: User, *, now: datetime | None = None) -> str:
        now = now or utcnow()
        payload = {
            "type": "access",
            "user_id": user.user_id,
            "company_id": user.company_id,
            "role": user.role.value,
            "email": user.email,
            "iat": now,
            "exp": now + self._access_ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def issue_refresh_token(self, user: User, *, now: datetime | None = None) -> str:
        now = now or utcnow()
        payload = {
            "type": "refresh",
            "user_id": user.user_id,
            "iat": now,
            "exp": now + self._refresh_ttl,
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def issue_pair(self, user: User, *, now: datetime | None = None) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(user, now=now),
            refresh_token=self.issue_refresh_token(user, now=now),
        )

    def decode(self, token: str, expected_type: str) -> dict:
        if not token:
            raise AuthenticationError("Authentication required")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Session expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid session token")

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid session token")
        return payload

    def current_user(self, access_token: str) -> CurrentUser:
        payload = self.decode(access_token, "access")
        try:
            return CurrentUser(
                user_id=int(payload["user_id"]),
                company_id=int(payload["company_id"]) if payload.get("company_id") is not None else None,
                role=Role(payload["role"]),
                email=str(payload.get("email", "")),
            )
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid session token")

    def refresh_user_id(self, refresh_token: str) -> int:
        payload = self.decode(refresh_token, "refresh")
        try:
            return int(payload["user_id"])
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid session token")

    def set_access_cookie(self, response, access_token: str) -> None:
        response.set_cookie(
            ACCESS_COOKIE,
            access_token,
            max_age=self.access_max_age,
            httponly=True,
            secure=self.cookies.secure,
            samesite=self.cookies.samesite,
            domain=self.cookies.domain,
            path="/",
        )

    def set_session_cookies(self, response, pair: TokenPair) -> None:
        self.set_access_cookie(response, pair.access_token)
        response.set_cookie(
            REFRESH_COOKIE,
            pair.refresh_token,
            max_age=self.refresh_max_age,
            httponly=True,
            secure=self.cookies.secure,
            samesite=self.cookies.samesite,
            domain=self.cookies.domain,
            path="/",
        )

    def clear_session_cookies(self, response) -> None:
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(name, path="/", domain=self.cookies.domain)

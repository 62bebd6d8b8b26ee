from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import utcnow
from ..common.validators import require_email, require_min_length, require_non_empty, require_timezone
from ..companies.repository import CompanyRepository
from ..core.constants import MIN_PASSWORD_LENGTH, VERIFICATION_CODE_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def generate_verification_code() -> str:
    return f"{secrets.randbelow(10 ** 6):06d}"


@dataclass(frozen=True)
class Registration:
    user: User
    company_id: int

    def to_dict(self) -> dict:
        return {"userId": self.user.user_id, "companyId": self.company_id, "email": self.user.email}


class AuthService:
    """Use case: account registration, email verification and login."""

    def __init__(
        self,
        users: UserRepository,
        companies: CompanyRepository,
        *,
        code_generator: Callable[[], str] = generate_verification_code,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._users = users
        self._companies = companies
        self._code_generator = code_generator
        self._clock = clock

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        company_name: str,
        industry: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> Registration:
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        company_name = require_non_empty(company_name, "Company name")
        tz = require_timezone(timezone) if timezone else None

        if self._users.get_by_email(email):
            raise ConflictError("An account with this email already exists")

        company_id = self._companies.create_company(name=company_name, email=email)
        company_changes = {}
        if industry:
            company_changes["industry"] = str(industry).strip()
        if tz:
            company_changes["timezone"] = tz
        if company_changes:
            self._companies.update_fields(company_id, company_changes)

        user_id = self._users.create_user(
            company_id=company_id,
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=Role.OWNER,
        )
        self._issue_verification_code(user_id, email)

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        logger.info("Registered company %s with owner user %s", company_id, user_id)
        return Registration(user=user, company_id=company_id)

    def _issue_verification_code(self, user_id: int, email: str) -> None:
        code = self._code_generator()
        self._users.update_fields(
            user_id,
            {
                "verification_code": code,
                "verification_expires_at": self._clock() + timedelta(minutes=VERIFICATION_CODE_MINUTES),
            },
        )
        # Delivery is out of band; the code is logged for operators.
        logger.info("Verification code for %s: %s", email, code)

    def verify_email(self, email: str, code: str) -> User:
        email = require_email(email)
        code = require_non_empty(code, "Code")
        if len(code) != 6 or not code.isdigit():
            raise ValidationError("Code must be 6 digits")

        user = self._users.get_by_email(email)
        if not user:
            raise ValidationError("Invalid or expired verification code")
        if user.email_verified:
            return user
        if user.verification_code != code:
            raise ValidationError("Invalid or expired verification code")
        if user.verification_expires_at is None or user.verification_expires_at < self._clock():
            raise ValidationError("Invalid or expired verification code")

        self._users.update_fields(
            user.user_id,
            {"email_verified": True, "verification_code": None, "verification_expires_at": None},
        )
        logger.info("Email verified for user %s", user.user_id)
        return self._users.get_by_id(user.user_id) or user

    def resend_verification(self, email: str) -> None:
        email = require_email(email)
        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        if user.email_verified:
            raise ValidationError("Email is already verified")
        self._issue_verification_code(user.user_id, user.email)

    def authenticate(self, email: str, password: str) -> User:
        email = require_email(email)
        if not password:
            raise ValidationError("Password is required")

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # Unknown hash method stored for this row.
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        if not user.email_verified:
            raise AuthorizationError("Please verify your email first", details={"requiresVerification": True})

        now = self._clock()
        self._users.update_fields(user.user_id, {"last_login_at": now})
        logger.info("User %s logged in", user.user_id)
        return self._users.get_by_id(user.user_id) or user

    def active_user(self, user_id: int) -> User:
        """Re-read a user for token refresh; inactive or deleted accounts end the session."""
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Session is no longer valid")
        return user

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

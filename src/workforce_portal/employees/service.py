from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

from werkzeug.security import generate_password_hash

from ..auth.model import CurrentUser, User
from ..auth.repository import UserRepository
from ..common.datetime_utils import utcnow
from ..common.validators import require_choice, require_email, require_int, require_min_length, require_non_empty
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_PAGE_SIZE, INVITATION_DAYS, MAX_PAGE_SIZE, MIN_PASSWORD_LENGTH
from ..core.enums import InvitationStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PlanLimitError,
    ValidationError,
)
from .model import EmployeePage, Invitation
from .repository import InvitationRepository

logger = logging.getLogger(__name__)

# Roles an owner/admin may hand out; ownership is never transferred here.
ASSIGNABLE_ROLES = (Role.ADMIN, Role.MANAGER, Role.EMPLOYEE)


def generate_invitation_token() -> str:
    return secrets.token_hex(32)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


class EmployeeService:
    """Use case: manage the people of one company."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_employees(
        self,
        actor: CurrentUser,
        *,
        page: Any = 1,
        page_size: Any = DEFAULT_PAGE_SIZE,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> EmployeePage:
        page_n = require_int(page or 1, "page", min_value=1)
        size = require_int(page_size or DEFAULT_PAGE_SIZE, "page_size", min_value=1, max_value=MAX_PAGE_SIZE)

        role_filter = require_choice(role, Role, "role") if role else None
        is_active: Optional[bool] = None
        if status:
            if status not in ("active", "inactive"):
                raise ValidationError("status must be active or inactive")
            is_active = status == "active"

        items, total = self._users.list_for_company(
            actor.company_id,
            role=role_filter,
            is_active=is_active,
            search=(search or "").strip() or None,
            offset=(page_n - 1) * size,
            limit=size,
        )
        return EmployeePage(items=list(items), total=total, page=page_n, page_size=size)

    def get_employee(self, actor: CurrentUser, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        # Another tenant's user is reported exactly like a missing one.
        if not user or user.company_id != actor.company_id:
            raise NotFoundError("Employee not found")
        return user

    def update_employee(self, actor: CurrentUser, user_id: int, updates: Mapping[str, Any]) -> User:
        user = self.get_employee(actor, user_id)
        changes: Dict[str, Any] = {}

        if "firstName" in updates:
            changes["first_name"] = require_non_empty(updates["firstName"], "First name")
        if "lastName" in updates:
            changes["last_name"] = require_non_empty(updates["lastName"], "Last name")
        for key in ("position", "phone"):
            if key in updates:
                changes[key] = _optional_text(updates[key])
        if updates.get("role") is not None:
            new_role = require_choice(updates["role"], Role, "role")
            if user.role == Role.OWNER and new_role != Role.OWNER:
                raise AuthorizationError("The owner's role cannot be changed")
            if new_role == Role.OWNER and user.role != Role.OWNER:
                raise AuthorizationError("The owner role cannot be assigned")
            if new_role != user.role:
                changes["role"] = new_role

        if not changes:
            raise ValidationError("No valid fields to update")

        self._users.update_fields(user.user_id, changes)
        logger.info("User %s updated employee %s: %s", actor.user_id, user.user_id, ", ".join(sorted(changes)))
        return self.get_employee(actor, user.user_id)

    def deactivate_employee(self, actor: CurrentUser, user_id: int) -> None:
        user = self.get_employee(actor, user_id)
        if user.user_id == actor.user_id:
            raise ValidationError("You cannot deactivate your own account")
        if user.role == Role.OWNER:
            raise AuthorizationError("The company owner cannot be deactivated")
        self._users.update_fields(user.user_id, {"is_active": False})
        logger.info("User %s deactivated employee %s", actor.user_id, user.user_id)


class InvitationService:
    """Use case: invite people into a company and accept invitations."""

    def __init__(
        self,
        invitations: InvitationRepository,
        users: UserRepository,
        companies: CompanyRepository,
        *,
        token_factory: Callable[[], str] = generate_invitation_token,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._invitations = invitations
        self._users = users
        self._companies = companies
        self._token_factory = token_factory
        self._clock = clock

    def invite(self, actor: CurrentUser, payload: Mapping[str, Any]) -> Invitation:
        email = require_email(payload.get("email"))
        first_name = require_non_empty(payload.get("firstName"), "First name")
        last_name = require_non_empty(payload.get("lastName"), "Last name")
        role = require_choice(payload.get("role") or Role.EMPLOYEE.value, Role, "role", allowed=ASSIGNABLE_ROLES)
        position = _optional_text(payload.get("position"))

        company = self._companies.get_by_id(actor.company_id) if actor.company_id is not None else None
        if not company:
            raise NotFoundError("Company not found")

        now = self._clock()
        if self._users.get_by_email(email):
            raise ConflictError("A user with this email already exists")
        if self._invitations.find_pending_for_email(company.company_id, email, now=now):
            raise ConflictError("An invitation is already pending for this email")

        active = self._users.count_active(company.company_id)
        pending = self._invitations.count_pending(company.company_id, now=now)
        if active + pending >= company.company_size:
            raise PlanLimitError(
                f"Employee limit of {company.company_size} reached",
                details={"limit": company.company_size, "current": active, "pending": pending},
            )

        token = self._token_factory()
        invitation_id = self._invitations.create_invitation(
            company_id=company.company_id,
            invited_by=actor.user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            position=position,
            token=token,
            expires_at=now + timedelta(days=INVITATION_DAYS),
        )
        logger.info("User %s invited %s to company %s", actor.user_id, email, company.company_id)
        invitation = self._invitations.get_by_id(invitation_id)
        if not invitation:
            raise NotFoundError("Invitation not found")
        return invitation

    def list_invitations(self, actor: CurrentUser) -> list:
        return list(self._invitations.list_for_company(actor.company_id))

    def cancel(self, actor: CurrentUser, invitation_id: int) -> None:
        invitation = self._invitations.get_by_id(invitation_id)
        if not invitation or invitation.company_id != actor.company_id:
            raise NotFoundError("Invitation not found")
        if invitation.status != InvitationStatus.PENDING:
            raise ValidationError(f"Invitation is already {invitation.status.value}")
        self._invitations.update_status(invitation.invitation_id, InvitationStatus.CANCELLED)
        logger.info("User %s cancelled invitation %s", actor.user_id, invitation_id)

    def accept(self, token: str, password: str) -> User:
        token = require_non_empty(token, "Token")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        invitation = self._invitations.get_by_token(token)
        if not invitation or invitation.status != InvitationStatus.PENDING:
            raise NotFoundError("Invitation not found or no longer valid")

        now = self._clock()
        if invitation.is_expired(now):
            self._invitations.update_status(invitation.invitation_id, InvitationStatus.EXPIRED)
            raise ValidationError("Invitation has expired")

        if self._users.get_by_email(invitation.email):
            raise ConflictError("A user with this email already exists")

        user_id = self._users.create_user(
            company_id=invitation.company_id,
            email=invitation.email,
            password_hash=generate_password_hash(password),
            first_name=invitation.first_name,
            last_name=invitation.last_name,
            role=invitation.role,
            email_verified=True,
            position=invitation.position,
        )
        self._invitations.update_status(invitation.invitation_id, InvitationStatus.ACCEPTED, accepted_at=now)
        logger.info("Invitation %s accepted, created user %s", invitation.invitation_id, user_id)

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import InvitationStatus, Role


@dataclass(frozen=True)
class Invitation:
    """An emailed invitation for a person to join a company."""

    invitation_id: int
    company_id: int
    invited_by: int
    email: str
    first_name: str
    last_name: str
    role: Role
    token: str
    status: InvitationStatus
    expires_at: datetime
    position: Optional[str] = None
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> dict:
        # The token is only handed out once, in the invite response.
        return {
            "id": self.invitation_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "position": self.position,
            "status": self.status.value,
            "expiresAt": iso_or_none(self.expires_at),
            "acceptedAt": iso_or_none(self.accepted_at),
            "createdAt": iso_or_none(self.created_at),
        }


@dataclass(frozen=True)
class EmployeePage:
    items: list
    total: int
    page: int
    page_size: int

    def to_dict(self) -> dict:
        return {
            "items": [u.to_public_dict() for u in self.items],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
        }

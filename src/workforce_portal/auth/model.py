from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a user account belonging to one company (tenant).

    Plain data object; no database access here.
    """

    user_id: int
    company_id: Optional[int]
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    email_verified: bool = False
    is_active: bool = True
    position: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    verification_code: Optional[str] = None
    verification_expires_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "companyId": self.company_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "position": self.position,
            "phone": self.phone,
            "emailVerified": self.email_verified,
            "isActive": self.is_active,
            "lastLoginAt": self.last_login_at.isoformat() if self.last_login_at else None,
        }


@dataclass(frozen=True)
class CurrentUser:
    """What the access token carries about the caller."""

    user_id: int
    company_id: Optional[int]
    role: Role
    email: str

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(user_id=user.user_id, company_id=user.company_id, role=user.role, email=user.email)

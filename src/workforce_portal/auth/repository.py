from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence, Tuple

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        company_id: Optional[int],
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Role,
        email_verified: bool = False,
        position: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, user_id: int, changes: Mapping[str, object]) -> bool:
        """Update whitelisted columns (first_name, last_name, role, position, phone, date_of_birth,
        email_verified, verification_code, verification_expires_at, is_active, last_login_at)."""

        raise NotImplementedError

    def list_for_company(
        self,
        company_id: int,
        *,
        role: Optional[Role] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[Sequence[User], int]:
        raise NotImplementedError

    def count_active(self, company_id: int) -> int:
        raise NotImplementedError

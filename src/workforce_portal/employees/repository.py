from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import InvitationStatus, Role
from .model import Invitation


class InvitationRepository(Protocol):
    """Repository contract for employee invitations."""

    def create_invitation(
        self,
        *,
        company_id: int,
        invited_by: int,
        email: str,
        first_name: str,
        last_name: str,
        role: Role,
        position: Optional[str],
        token: str,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[Invitation]:
        raise NotImplementedError

    def find_pending_for_email(self, company_id: int, email: str, *, now: datetime) -> Optional[Invitation]:
        raise NotImplementedError

    def list_for_company(self, company_id: int) -> Sequence[Invitation]:
        """Newest first."""
        raise NotImplementedError

    def count_pending(self, company_id: int, *, now: datetime) -> int:
        """Pending invitations that have not expired yet."""
        raise NotImplementedError

    def update_status(
        self, invitation_id: int, status: InvitationStatus, *, accepted_at: Optional[datetime] = None
    ) -> bool:
        raise NotImplementedError

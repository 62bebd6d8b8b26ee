from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..core.enums import InvitationStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Invitation
from .repository import InvitationRepository

_COLUMNS = """
    invitation_id, company_id, invited_by, email, first_name, last_name, role, position,
    token, status, expires_at, accepted_at, created_at
"""


def _row_to_invitation(row: dict) -> Invitation:
    return Invitation(
        invitation_id=int(row["invitation_id"]),
        company_id=int(row["company_id"]),
        invited_by=int(row["invited_by"]),
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=Role(row["role"]),
        position=row.get("position"),
        token=row["token"],
        status=InvitationStatus(row["status"]),
        expires_at=from_naive_utc(row["expires_at"]),
        accepted_at=from_naive_utc(row.get("accepted_at")),
        created_at=from_naive_utc(row.get("created_at")),
    )


class MySQLInvitationRepository(InvitationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_invitations(company_id, invited_by, email, first_name, last_name,
                                                 role, position, token, status, expires_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    company_id,
                    invited_by,
                    email.lower(),
                    first_name,
                    last_name,
                    role.value,
                    position,
                    token,
                    InvitationStatus.PENDING.value,
                    to_naive_utc(expires_at),
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, invitation_id: int) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employee_invitations WHERE invitation_id=%s", (invitation_id,))
            row = fetchone(cur)
            return _row_to_invitation(row) if row else None

    def get_by_token(self, token: str) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employee_invitations WHERE token=%s", (token,))
            row = fetchone(cur)
            return _row_to_invitation(row) if row else None

    def find_pending_for_email(self, company_id: int, email: str, *, now: datetime) -> Optional[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM employee_invitations
                WHERE company_id=%s AND email=%s AND status=%s AND expires_at > %s
                ORDER BY created_at DESC LIMIT 1
                """,
                (company_id, email.lower(), InvitationStatus.PENDING.value, to_naive_utc(now)),
            )
            row = fetchone(cur)
            return _row_to_invitation(row) if row else None

    def list_for_company(self, company_id: int) -> Sequence[Invitation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM employee_invitations
                WHERE company_id=%s
                ORDER BY created_at DESC, invitation_id DESC
                """,
                (company_id,),
            )
            return [_row_to_invitation(r) for r in fetchall(cur)]

    def count_pending(self, company_id: int, *, now: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS total FROM employee_invitations
                WHERE company_id=%s AND status=%s AND expires_at > %s
                """,
                (company_id, InvitationStatus.PENDING.value, to_naive_utc(now)),
            )
            return int((fetchone(cur) or {}).get("total", 0))

    def update_status(
        self, invitation_id: int, status: InvitationStatus, *, accepted_at: Optional[datetime] = None
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee_invitations SET status=%s, accepted_at=%s WHERE invitation_id=%s",
                (status.value, to_naive_utc(accepted_at), invitation_id),
            )
            return cur.rowcount > 0

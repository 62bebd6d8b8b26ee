from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, company_id, email, password_hash, first_name, last_name, role, position, phone,
    date_of_birth, email_verified, verification_code, verification_expires_at, is_active,
    last_login_at, created_at
"""

_UPDATABLE = (
    "first_name",
    "last_name",
    "role",
    "position",
    "phone",
    "date_of_birth",
    "email_verified",
    "verification_code",
    "verification_expires_at",
    "is_active",
    "last_login_at",
)


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        company_id=int(row["company_id"]) if row.get("company_id") is not None else None,
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=Role(row["role"]),
        email_verified=bool(row.get("email_verified")),
        is_active=bool(row.get("is_active", True)),
        position=row.get("position"),
        phone=row.get("phone"),
        date_of_birth=row.get("date_of_birth"),
        verification_code=row.get("verification_code"),
        verification_expires_at=from_naive_utc(row.get("verification_expires_at")),
        last_login_at=from_naive_utc(row.get("last_login_at")),
        created_at=from_naive_utc(row.get("created_at")),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(company_id, email, password_hash, first_name, last_name, role,
                                  position, email_verified, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (company_id, email.lower(), password_hash, first_name, last_name, role.value, position, int(email_verified)),
            )
            return int(cur.lastrowid)

    def update_fields(self, user_id: int, changes: Mapping[str, object]) -> bool:
        if not changes:
            return False
        values = dict(changes)
        if isinstance(values.get("role"), Role):
            values["role"] = values["role"].value
        for key in ("verification_expires_at", "last_login_at"):
            if key in values:
                values[key] = to_naive_utc(values[key])
        sql, params = build_update("users", "user_id", user_id, values, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

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
        where = ["company_id=%s"]
        params: list = [company_id]
        if role is not None:
            where.append("role=%s")
            params.append(role.value)
        if is_active is not None:
            where.append("is_active=%s")
            params.append(int(is_active))
        if search:
            where.append("(first_name LIKE %s OR last_name LIKE %s OR email LIKE %s)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern, pattern])
        clause = " AND ".join(where)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users WHERE {clause}", tuple(params))
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM users
                WHERE {clause}
                ORDER BY created_at DESC, user_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_user(r) for r in fetchall(cur)], total

    def count_active(self, company_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM users WHERE company_id=%s AND is_active=1", (company_id,))
            return int((fetchone(cur) or {}).get("total", 0))

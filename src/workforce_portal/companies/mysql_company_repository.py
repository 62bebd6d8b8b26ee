from __future__ import annotations

import json
from enum import Enum
from typing import Mapping, Optional

from ..common.datetime_utils import from_naive_utc
from ..core.enums import SubscriptionPlan, SubscriptionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchone, load_json, normalize_mysql_time
from .model import Company, default_working_days
from .repository import CompanyRepository

_UPDATABLE = (
    "name",
    "email",
    "industry",
    "company_size",
    "tax_id",
    "website",
    "address",
    "city",
    "state_province",
    "country",
    "postal_code",
    "office_latitude",
    "office_longitude",
    "logo_url",
    "subscription_plan",
    "subscription_status",
    "trial_start_date",
    "trial_end_date",
    "onboarding_completed",
    "owner_first_name",
    "owner_last_name",
    "owner_email",
    "owner_phone",
    "owner_date_of_birth",
    "work_start_time",
    "work_end_time",
    "working_days",
    "timezone",
    "grace_period_minutes",
    "early_departure_threshold_minutes",
    "geofence_radius_meters",
    "require_geofence_for_clockin",
    "allow_remote_clockin",
    "notify_early_departure",
)


def _float_or_none(value) -> Optional[float]:
    return float(value) if value is not None else None


def _row_to_company(row: dict) -> Company:
    return Company(
        company_id=int(row["company_id"]),
        name=row["name"],
        email=row.get("email"),
        industry=row.get("industry"),
        company_size=int(row.get("company_size") or 0),
        tax_id=row.get("tax_id"),
        website=row.get("website"),
        address=row.get("address"),
        city=row.get("city"),
        state_province=row.get("state_province"),
        country=row.get("country"),
        postal_code=row.get("postal_code"),
        office_latitude=_float_or_none(row.get("office_latitude")),
        office_longitude=_float_or_none(row.get("office_longitude")),
        logo_url=row.get("logo_url"),
        subscription_plan=SubscriptionPlan(row["subscription_plan"]),
        subscription_status=SubscriptionStatus(row["subscription_status"]),
        trial_start_date=row.get("trial_start_date"),
        trial_end_date=row.get("trial_end_date"),
        onboarding_completed=bool(row.get("onboarding_completed")),
        owner_first_name=row.get("owner_first_name"),
        owner_last_name=row.get("owner_last_name"),
        owner_email=row.get("owner_email"),
        owner_phone=row.get("owner_phone"),
        owner_date_of_birth=row.get("owner_date_of_birth"),
        work_start_time=normalize_mysql_time(row["work_start_time"]),
        work_end_time=normalize_mysql_time(row["work_end_time"]),
        working_days=load_json(row.get("working_days"), default_working_days()),
        timezone=row.get("timezone") or "UTC",
        grace_period_minutes=int(row["grace_period_minutes"]),
        early_departure_threshold_minutes=int(row["early_departure_threshold_minutes"]),
        geofence_radius_meters=int(row["geofence_radius_meters"]),
        require_geofence_for_clockin=bool(row["require_geofence_for_clockin"]),
        allow_remote_clockin=bool(row["allow_remote_clockin"]),
        notify_early_departure=bool(row["notify_early_departure"]),
        created_at=from_naive_utc(row.get("created_at")),
    )


def _to_column_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, dict):
        return json.dumps(value)
    return value


class MySQLCompanyRepository(CompanyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, company_id: int) -> Optional[Company]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM companies WHERE company_id=%s", (company_id,))
            row = fetchone(cur)
            return _row_to_company(row) if row else None

    def create_company(self, *, name: str, email: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO companies(name, email, subscription_plan, subscription_status, working_days)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    name,
                    email,
                    SubscriptionPlan.TRIAL.value,
                    SubscriptionStatus.TRIAL.value,
                    json.dumps(default_working_days()),
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, company_id: int, changes: Mapping[str, object]) -> bool:
        if not changes:
            return False
        values = {key: _to_column_value(value) for key, value in changes.items()}
        sql, params = build_update("companies", "company_id", company_id, values, _UPDATABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

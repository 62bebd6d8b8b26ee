from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    ar.attendance_id, ar.company_id, ar.user_id, ar.work_date, ar.clock_in_time, ar.clock_out_time,
    ar.clock_in_distance_meters, ar.clock_out_distance_meters, ar.is_within_geofence, ar.status,
    ar.minutes_late, ar.minutes_early, ar.departure_reason
"""


def _float_or_none(value) -> Optional[float]:
    return float(value) if value is not None else None


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        company_id=int(r["company_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        clock_in_time=from_naive_utc(r["clock_in_time"]),
        clock_out_time=from_naive_utc(r.get("clock_out_time")),
        clock_in_distance_meters=_float_or_none(r.get("clock_in_distance_meters")),
        clock_out_distance_meters=_float_or_none(r.get("clock_out_distance_meters")),
        is_within_geofence=bool(r.get("is_within_geofence", True)),
        status=AttendanceStatus(r["status"]),
        minutes_late=int(r.get("minutes_late") or 0),
        minutes_early=int(r.get("minutes_early") or 0),
        departure_reason=r.get("departure_reason"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.user_id=%s AND ar.work_date=%s
                ORDER BY ar.clock_in_time DESC, ar.attendance_id DESC
                LIMIT 1
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create_clock_in(
        self,
        *,
        company_id: int,
        user_id: int,
        work_date: date,
        clock_in_time: datetime,
        distance_meters: Optional[float],
        is_within_geofence: bool,
        status: AttendanceStatus,
        minutes_late: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(company_id, user_id, work_date, clock_in_time,
                                               clock_in_distance_meters, is_within_geofence, status, minutes_late)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    company_id,
                    user_id,
                    work_date,
                    to_naive_utc(clock_in_time),
                    distance_meters,
                    int(is_within_geofence),
                    status.value,
                    int(minutes_late),
                ),
            )
            return int(cur.lastrowid)

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out_time: datetime,
        distance_meters: Optional[float],
        status: AttendanceStatus,
        minutes_early: int,
        departure_reason: Optional[str],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out_time=%s, clock_out_distance_meters=%s, status=%s, minutes_early=%s,
                    departure_reason=%s
                WHERE attendance_id=%s
                """,
                (
                    to_naive_utc(clock_out_time),
                    distance_meters,
                    status.value,
                    int(minutes_early),
                    departure_reason,
                    attendance_id,
                ),
            )

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.user_id=%s
                ORDER BY ar.work_date DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_company_and_date(self, company_id: int, work_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, u.first_name, u.last_name, u.email
                FROM attendance_records ar
                JOIN users u ON u.user_id = ar.user_id
                WHERE ar.company_id=%s AND ar.work_date=%s
                ORDER BY ar.clock_in_time ASC
                """,
                (company_id, work_date),
            )
            return [
                AttendanceReportRow(
                    record=_row_to_record(r),
                    full_name=f"{r['first_name']} {r['last_name']}".strip(),
                    email=r["email"],
                )
                for r in fetchall(cur)
            ]

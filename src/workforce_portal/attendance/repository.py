from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    """Repository contract for attendance records."""

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Latest record of that work day; earlier sessions may already be closed."""
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        """Newest work day first."""
        raise NotImplementedError

    def list_for_company_and_date(self, company_id: int, work_date: date) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's clock-in/clock-out for one work day."""

    attendance_id: int
    company_id: int
    user_id: int
    work_date: date
    clock_in_time: datetime
    status: AttendanceStatus
    clock_out_time: Optional[datetime] = None
    clock_in_distance_meters: Optional[float] = None
    clock_out_distance_meters: Optional[float] = None
    is_within_geofence: bool = True
    minutes_late: int = 0
    minutes_early: int = 0
    departure_reason: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "userId": self.user_id,
            "workDate": self.work_date.isoformat(),
            "clockInTime": iso_or_none(self.clock_in_time),
            "clockOutTime": iso_or_none(self.clock_out_time),
            "status": self.status.value,
            "clockInDistanceMeters": self.clock_in_distance_meters,
            "clockOutDistanceMeters": self.clock_out_distance_meters,
            "isWithinGeofence": self.is_within_geofence,
            "minutesLate": self.minutes_late,
            "minutesEarly": self.minutes_early,
            "departureReason": self.departure_reason,
        }


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for the company-wide daily view."""

    record: AttendanceRecord
    full_name: str
    email: str

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data.update({"employeeName": self.full_name, "email": self.email})
        return data

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, List, Mapping, Optional

from ..auth.model import CurrentUser
from ..common.datetime_utils import to_local, utcnow
from ..common.geolocation import Coordinates, calculate_distance
from ..common.validators import require_coordinates, require_int, require_iso_date
from ..companies.model import Company
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500


def parse_location(value: Any) -> Optional[Coordinates]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("location must be an object with latitude and longitude")
    lat, lon = require_coordinates(value.get("latitude"), value.get("longitude"))
    return Coordinates(latitude=lat, longitude=lon)


@dataclass(frozen=True)
class GeofenceCheck:
    distance_meters: Optional[float]
    is_within: bool


class AttendanceService:
    """Use case: geofenced clock-in/clock-out in the company's timezone."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        companies: CompanyRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._attendance = attendance
        self._companies = companies
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def _company(self, actor: CurrentUser) -> Company:
        company = self._companies.get_by_id(actor.company_id) if actor.company_id is not None else None
        if not company:
            raise NotFoundError("Company not found")
        return company

    def _measure(self, company: Company, location: Optional[Coordinates]) -> GeofenceCheck:
        if location is None or not company.has_office_location:
            return GeofenceCheck(distance_meters=None, is_within=True)
        office = Coordinates(latitude=company.office_latitude, longitude=company.office_longitude)
        distance = calculate_distance(location, office)
        return GeofenceCheck(distance_meters=round(distance, 2), is_within=distance <= company.geofence_radius_meters)

    def _check_clock_in_location(self, company: Company, location: Optional[Coordinates]) -> GeofenceCheck:
        check = self._measure(company, location)
        if not (company.require_geofence_for_clockin and company.has_office_location):
            return check

        if location is None:
            if company.allow_remote_clockin:
                return GeofenceCheck(distance_meters=None, is_within=False)
            raise ValidationError("Location is required to clock in")

        if not check.is_within:
            raise ValidationError(
                f"You must be within {company.geofence_radius_meters}m of the office to clock in. "
                f"You are {round(check.distance_meters)}m away.",
                details={"distance": check.distance_meters, "allowedRadius": company.geofence_radius_meters},
            )
        return check

    def clock_in(self, actor: CurrentUser, *, location: Any = None) -> AttendanceRecord:
        company = self._company(actor)
        coords = parse_location(location)
        now = self._clock()
        local_now = to_local(now, company.timezone)
        work_date = local_now.date()

        latest = self._attendance.get_for_user_and_date(actor.user_id, work_date)
        if latest and latest.is_open:
            raise ConflictError("Already clocked in today")

        check = self._check_clock_in_location(company, coords)
        strategy = self._factory.for_clock_in(local_now=local_now, company=company)
        decision = strategy.decide_clock_in(local_now=local_now, company=company)

        attendance_id = self._attendance.create_clock_in(
            company_id=company.company_id,
            user_id=actor.user_id,
            work_date=work_date,
            clock_in_time=now,
            distance_meters=check.distance_meters,
            is_within_geofence=check.is_within,
            status=decision.status,
            minutes_late=decision.minutes_late,
        )
        logger.info(
            "User %s clocked in (status=%s, distance=%s)", actor.user_id, decision.status.value, check.distance_meters
        )
        return self._reload(attendance_id)

    def clock_out(
        self, actor: CurrentUser, *, location: Any = None, departure_reason: Optional[str] = None
    ) -> AttendanceRecord:
        company = self._company(actor)
        coords = parse_location(location)
        now = self._clock()
        local_now = to_local(now, company.timezone)

        record = self._attendance.get_for_user_and_date(actor.user_id, local_now.date())
        if not record:
            raise ValidationError("You have not clocked in today")
        if not record.is_open:
            raise ConflictError("Already clocked out today")

        check = self._measure(company, coords)
        strategy = self._factory.for_clock_out(local_now=local_now, company=company)
        decision = strategy.decide_clock_out(local_now=local_now, company=company, current=record.status)

        reason = (departure_reason or "").strip() or None
        if reason and len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"Departure reason must be at most {MAX_REASON_LENGTH} characters")

        self._attendance.update_clock_out(
            attendance_id=record.attendance_id,
            clock_out_time=now,
            distance_meters=check.distance_meters,
            status=decision.status,
            minutes_early=decision.minutes_early,
            departure_reason=reason,
        )
        if decision.minutes_early and company.notify_early_departure:
            logger.warning(
                "Early departure: user %s left %d minutes early (company %s)",
                actor.user_id,
                decision.minutes_early,
                company.company_id,
            )
        logger.info("User %s clocked out (status=%s)", actor.user_id, decision.status.value)
        return self._reload(record.attendance_id)

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def current(self, actor: CurrentUser) -> Optional[AttendanceRecord]:
        company = self._company(actor)
        today = to_local(self._clock(), company.timezone).date()
        return self._attendance.get_for_user_and_date(actor.user_id, today)

    def history(self, actor: CurrentUser, *, limit: Any = None) -> List[AttendanceRecord]:
        size = require_int(limit or DEFAULT_HISTORY_LIMIT, "limit", min_value=1, max_value=365)
        return list(self._attendance.get_recent_for_user(actor.user_id, size))

    def company_day(self, actor: CurrentUser, *, day: Optional[str] = None) -> List[AttendanceReportRow]:
        company = self._company(actor)
        work_date: date = (
            require_iso_date(day, "date") if day else to_local(self._clock(), company.timezone).date()
        )
        return list(self._attendance.list_for_company_and_date(company.company_id, work_date))

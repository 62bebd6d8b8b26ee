from __future__ import annotations

from datetime import datetime, timezone

import pytest

from workforce_portal.attendance.service import AttendanceService
from workforce_portal.core.enums import AttendanceStatus
from workforce_portal.core.exceptions import ConflictError, ValidationError

OFFICE = {"latitude": 6.5244, "longitude": 3.3792}
NEAR = {"latitude": 6.52485, "longitude": 3.3792}  # ~50m north
FAR = {"latitude": 6.5344, "longitude": 3.3792}  # ~1.1km north


@pytest.fixture
def lagos_company(companies, company):
    companies.update_fields(
        company.company_id,
        {
            "timezone": "Africa/Lagos",
            "office_latitude": OFFICE["latitude"],
            "office_longitude": OFFICE["longitude"],
        },
    )
    return companies.get_by_id(company.company_id)


@pytest.fixture
def service(attendance, companies, clock):
    return AttendanceService(attendance, companies, clock=clock)


def test_clock_in_inside_fence_records_late_status(service, owner_actor, lagos_company):
    # 09:00 UTC is 10:00 in Lagos: an hour past start, beyond the 15 minute grace
    record = service.clock_in(owner_actor, location=NEAR)

    assert record.status == AttendanceStatus.LATE
    assert record.minutes_late == 60
    assert record.is_within_geofence is True
    assert 40 < record.clock_in_distance_meters < 60
    assert record.work_date.isoformat() == "2026-03-02"


def test_second_clock_in_same_day_conflicts(service, owner_actor, lagos_company):
    service.clock_in(owner_actor, location=NEAR)

    with pytest.raises(ConflictError, match="Already clocked in today"):
        service.clock_in(owner_actor, location=NEAR)


def test_clock_in_requires_location_when_geofenced(service, owner_actor, lagos_company):
    with pytest.raises(ValidationError, match="Location is required"):
        service.clock_in(owner_actor)


def test_remote_clock_in_without_location_is_flagged_outside(service, owner_actor, companies, lagos_company):
    companies.update_fields(lagos_company.company_id, {"allow_remote_clockin": True})

    record = service.clock_in(owner_actor)

    assert record.is_within_geofence is False
    assert record.clock_in_distance_meters is None


def test_clock_in_outside_radius_is_rejected_with_distance(service, owner_actor, lagos_company):
    with pytest.raises(ValidationError) as exc:
        service.clock_in(owner_actor, location=FAR)

    assert "within 100m of the office" in exc.value.message
    assert "1112m away" in exc.value.message
    assert exc.value.details["allowedRadius"] == 100


def test_clock_in_without_office_skips_fence(service, owner_actor, company, clock):
    clock.now = datetime(2026, 3, 2, 8, 50, tzinfo=timezone.utc)

    record = service.clock_in(owner_actor, location=FAR)

    assert record.status == AttendanceStatus.PRESENT
    assert record.is_within_geofence is True
    assert record.clock_in_distance_meters is None


def test_invalid_location_payload_is_rejected(service, owner_actor, lagos_company):
    with pytest.raises(ValidationError):
        service.clock_in(owner_actor, location={"latitude": 123, "longitude": 3.3})


def test_early_clock_out_marks_departure_and_keeps_reason(service, owner_actor, lagos_company, clock):
    service.clock_in(owner_actor, location=NEAR)
    # 15:00 local, two hours before the 17:00 end
    clock.now = datetime(2026, 3, 2, 14, 0, tzinfo=timezone.utc)

    record = service.clock_out(owner_actor, location=NEAR, departure_reason="  Doctor's appointment ")

    assert record.status == AttendanceStatus.EARLY_DEPARTURE
    assert record.minutes_early == 120
    assert record.departure_reason == "Doctor's appointment"
    assert record.clock_out_time == clock.now


def test_normal_clock_out_keeps_clock_in_status(service, owner_actor, lagos_company, clock):
    service.clock_in(owner_actor, location=NEAR)
    clock.now = datetime(2026, 3, 2, 16, 5, tzinfo=timezone.utc)

    record = service.clock_out(owner_actor)

    assert record.status == AttendanceStatus.LATE
    assert record.minutes_early == 0


def test_clock_in_again_after_clocking_out(service, owner_actor, lagos_company, clock):
    first = service.clock_in(owner_actor, location=NEAR)
    clock.now = datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc)
    service.clock_out(owner_actor, location=NEAR)
    clock.now = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)

    second = service.clock_in(owner_actor, location=NEAR)

    assert second.attendance_id != first.attendance_id
    assert service.current(owner_actor).attendance_id == second.attendance_id
    with pytest.raises(ConflictError, match="Already clocked in today"):
        service.clock_in(owner_actor, location=NEAR)

    clock.now = datetime(2026, 3, 2, 16, 5, tzinfo=timezone.utc)
    closed = service.clock_out(owner_actor)
    assert closed.attendance_id == second.attendance_id
    assert service.history(owner_actor)[0].work_date == first.work_date


def test_clock_out_requires_an_open_record(service, owner_actor, lagos_company, clock):
    with pytest.raises(ValidationError, match="not clocked in"):
        service.clock_out(owner_actor)

    service.clock_in(owner_actor, location=NEAR)
    clock.now = datetime(2026, 3, 2, 16, 5, tzinfo=timezone.utc)
    service.clock_out(owner_actor)

    with pytest.raises(ConflictError):
        service.clock_out(owner_actor)


def test_departure_reason_length_is_capped(service, owner_actor, lagos_company):
    service.clock_in(owner_actor, location=NEAR)

    with pytest.raises(ValidationError):
        service.clock_out(owner_actor, departure_reason="x" * 501)


def test_history_limit_bounds(service, owner_actor, lagos_company):
    service.clock_in(owner_actor, location=NEAR)

    assert len(service.history(owner_actor)) == 1
    with pytest.raises(ValidationError):
        service.history(owner_actor, limit=366)


def test_company_day_lists_everyone_for_the_date(service, owner_actor, users, lagos_company):
    service.clock_in(owner_actor, location=NEAR)

    rows = service.company_day(owner_actor, day="2026-03-02")

    assert [r.to_dict()["employeeName"] for r in rows] == ["Ada Owner"]
    assert service.company_day(owner_actor, day="2026-03-01") == []

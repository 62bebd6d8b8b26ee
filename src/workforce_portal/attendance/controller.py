from __future__ import annotations

from flask import Flask, request

from ..auth.guards import build_guards, current_user
from ..common.responses import json_body, ok
from ..core.enums import Feature, Role


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    attendance = container.attendance_service

    @app.post("/api/attendance/clock-in", endpoint="attendance_clock_in")
    @guards.login_required
    @guards.feature_required(Feature.ATTENDANCE)
    def attendance_clock_in():
        payload = json_body()
        record = attendance.clock_in(current_user(), location=payload.get("location"))
        return ok(record.to_dict(), "Clocked in successfully", 201)

    @app.post("/api/attendance/clock-out", endpoint="attendance_clock_out")
    @guards.login_required
    @guards.feature_required(Feature.ATTENDANCE)
    def attendance_clock_out():
        payload = json_body()
        record = attendance.clock_out(
            current_user(),
            location=payload.get("location"),
            departure_reason=payload.get("departureReason"),
        )
        return ok(record.to_dict(), "Clocked out successfully")

    @app.get("/api/attendance/current", endpoint="attendance_current")
    @guards.login_required
    def attendance_current():
        record = attendance.current(current_user())
        return ok(record.to_dict() if record else None)

    @app.get("/api/attendance/history", endpoint="attendance_history")
    @guards.login_required
    def attendance_history():
        records = attendance.history(current_user(), limit=request.args.get("limit"))
        return ok([r.to_dict() for r in records])

    @app.get("/api/attendance/company", endpoint="attendance_company")
    @guards.roles_required(Role.OWNER, Role.ADMIN, Role.MANAGER)
    def attendance_company():
        rows = attendance.company_day(current_user(), day=request.args.get("date"))
        return ok([r.to_dict() for r in rows])

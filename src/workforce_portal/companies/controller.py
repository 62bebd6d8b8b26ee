from __future__ import annotations

from flask import Flask

from ..auth.guards import build_guards, current_user
from ..common.responses import json_body, ok
from ..core.enums import Role


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    settings = container.company_settings_service
    subscriptions = container.subscription_service
    managers = (Role.OWNER, Role.ADMIN)

    @app.get("/api/company-settings", endpoint="company_settings")
    @guards.login_required
    def company_settings():
        return ok(settings.get_settings(current_user().company_id))

    @app.patch("/api/company-settings/work-schedule", endpoint="company_work_schedule")
    @guards.roles_required(*managers)
    def company_work_schedule():
        data = settings.update_work_schedule(current_user().company_id, json_body())
        return ok(data, "Work schedule updated")

    @app.patch("/api/company-settings/attendance", endpoint="company_attendance_settings")
    @guards.roles_required(*managers)
    def company_attendance_settings():
        data = settings.update_attendance_settings(current_user().company_id, json_body())
        return ok(data, "Attendance settings updated")

    @app.patch("/api/company-settings/location", endpoint="company_location")
    @guards.roles_required(*managers)
    def company_location():
        data = settings.update_location(current_user().company_id, json_body())
        return ok(data, "Office location updated")

    @app.get("/api/company/subscription-status", endpoint="company_subscription_status")
    @guards.login_required
    def company_subscription_status():
        return ok(subscriptions.subscription_status(current_user().company_id))

    @app.get("/api/company/subscription-info", endpoint="company_subscription_info")
    @guards.login_required
    def company_subscription_info():
        return ok(subscriptions.subscription_info(current_user().company_id))

    @app.get("/api/company/info", endpoint="company_info")
    @guards.login_required
    def company_info():
        return ok(subscriptions.company_info(current_user().company_id))

from __future__ import annotations

from flask import Flask, request

from ..auth.guards import build_guards, current_user
from ..common.responses import json_body, ok
from ..core.exceptions import ValidationError


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    onboarding = container.onboarding_service

    @app.post("/api/onboarding/company-setup", endpoint="onboarding_company_setup")
    @guards.login_required
    def onboarding_company_setup():
        return ok(onboarding.company_setup(current_user(), json_body()), "Company setup saved")

    @app.post("/api/onboarding/owner-details", endpoint="onboarding_owner_details")
    @guards.login_required
    def onboarding_owner_details():
        return ok(onboarding.owner_details(current_user(), json_body()), "Owner details saved")

    @app.post("/api/onboarding/business-info", endpoint="onboarding_business_info")
    @guards.login_required
    def onboarding_business_info():
        return ok(onboarding.business_info(current_user(), json_body()), "Business information saved")

    @app.post("/api/onboarding/upload-logo", endpoint="onboarding_upload_logo")
    @guards.login_required
    def onboarding_upload_logo():
        upload = request.files.get("logo") or request.files.get("file")
        if upload is None:
            raise ValidationError("No logo uploaded")
        data = onboarding.upload_logo(
            current_user(),
            content=upload.read(),
            filename=upload.filename or "",
            mime_type=upload.mimetype,
        )
        return ok(data, "Logo uploaded")

    @app.post("/api/onboarding/select-plan", endpoint="onboarding_select_plan")
    @guards.login_required
    def onboarding_select_plan():
        return ok(onboarding.select_plan(current_user(), json_body()), "Plan selected")

    @app.post("/api/onboarding/complete", endpoint="onboarding_complete")
    @guards.login_required
    def onboarding_complete():
        data = onboarding.complete(current_user())
        return ok(data, "Onboarding completed successfully", redirectUrl=data["redirectUrl"])

    @app.get("/api/onboarding/status", endpoint="onboarding_status")
    @guards.login_required
    def onboarding_status():
        return ok(onboarding.status(current_user()))

    @app.post("/api/onboarding/save-progress", endpoint="onboarding_save_progress")
    @guards.login_required
    def onboarding_save_progress():
        progress = onboarding.save_progress(current_user(), json_body())
        return ok(progress.to_dict(), "Progress saved")

    @app.get("/api/onboarding/progress", endpoint="onboarding_progress")
    @guards.login_required
    def onboarding_progress():
        return ok(onboarding.get_progress(current_user()))

from __future__ import annotations

import io

import pytest

from workforce_portal.core.enums import Role


@pytest.fixture
def registrant(users, companies):
    company = companies.add(name="NewCo", email="grace@newco.test")
    return users.add(
        company_id=company.company_id,
        email="grace@newco.test",
        first_name="Grace",
        last_name="Founder",
        role=Role.OWNER,
    )


def test_onboarding_requires_login(client):
    resp = client.get("/api/onboarding/status")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_progress_is_404_until_saved(login, registrant):
    client = login(registrant)

    missing = client.get("/api/onboarding/progress")
    saved = client.post(
        "/api/onboarding/save-progress",
        json={"currentStep": 3, "completedSteps": [1, 2], "formData": {"firstName": "Grace"}},
    )
    loaded = client.get("/api/onboarding/progress")

    assert missing.status_code == 404
    assert missing.get_json()["message"] == "No onboarding progress found"
    assert saved.get_json()["message"] == "Progress saved"
    assert loaded.get_json()["data"]["completedSteps"] == [1, 2]
    assert loaded.get_json()["data"]["formData"] == {"firstName": "Grace"}


def test_company_setup_route_returns_next_step(login, registrant):
    resp = login(registrant).post(
        "/api/onboarding/company-setup",
        json={"firstName": "Grace", "lastName": "Hopper", "phoneNumber": "08012345678", "dateOfBirth": "1990-05-01", "isOwner": False},
    )

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"isOwner": False, "nextStep": 3}


def test_upload_logo_route(login, registrant, companies):
    png = b"\x89PNG\r\n\x1a\n" + b"\x01" * 256
    resp = login(registrant).post(
        "/api/onboarding/upload-logo",
        data={"logo": (io.BytesIO(png), "logo.png", "image/png")},
        content_type="multipart/form-data",
    )

    body = resp.get_json()
    assert resp.status_code == 200
    assert companies.get_by_id(registrant.company_id).logo_url == body["data"]["logoUrl"]


def test_complete_route_reports_missing_items(login, registrant):
    resp = login(registrant).post("/api/onboarding/complete", json={})

    body = resp.get_json()
    assert resp.status_code == 400
    assert body["message"].startswith("Cannot complete onboarding. Missing: business information")
    assert "subscription plan" in body["missing"]

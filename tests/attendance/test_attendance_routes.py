from __future__ import annotations

from workforce_portal.core.enums import Role


def test_clock_in_and_current_over_http(login, owner):
    client = login(owner)

    created = client.post("/api/attendance/clock-in", json={})
    current = client.get("/api/attendance/current")

    assert created.status_code == 201
    assert created.get_json()["success"] is True
    assert current.get_json()["data"]["id"] == created.get_json()["data"]["id"]


def test_clock_in_requires_login(client):
    resp = client.post("/api/attendance/clock-in", json={})

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Authentication required", "requiresLogin": True}


def test_company_view_is_for_managers_only(login, users, company):
    staff = users.add(
        company_id=company.company_id,
        email="staff@acme.test",
        first_name="Sam",
        last_name="Staff",
        role=Role.EMPLOYEE,
    )
    client = login(staff)

    resp = client.get("/api/attendance/company")

    assert resp.status_code == 403

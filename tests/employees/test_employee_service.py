from __future__ import annotations

import pytest

from workforce_portal.auth.model import CurrentUser
from workforce_portal.core.enums import Role
from workforce_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from workforce_portal.employees.service import EmployeeService


@pytest.fixture
def service(users):
    return EmployeeService(users)


@pytest.fixture
def staff(users, company):
    return users.add(
        company_id=company.company_id,
        email="staff@acme.test",
        first_name="Sam",
        last_name="Staff",
        role=Role.EMPLOYEE,
    )


def test_list_filters_and_paginates(service, owner_actor, owner, staff, users, company):
    users.add(company_id=company.company_id, email="gone@acme.test", first_name="Gone", last_name="Away", role=Role.EMPLOYEE, is_active=False)

    page = service.list_employees(owner_actor, role="employee", status="active")
    searched = service.list_employees(owner_actor, search="ada")

    assert [u.email for u in page.items] == ["staff@acme.test"]
    assert page.to_dict()["total"] == 1
    assert [u.email for u in searched.items] == ["owner@acme.test"]


def test_list_rejects_bad_status_and_page_size(service, owner_actor):
    with pytest.raises(ValidationError):
        service.list_employees(owner_actor, status="retired")
    with pytest.raises(ValidationError):
        service.list_employees(owner_actor, page_size=101)


def test_other_tenant_employee_is_not_found(service, owner_actor, users, companies):
    other = companies.add(name="Other Co")
    stranger = users.add(company_id=other.company_id, email="x@other.test", first_name="X", last_name="Y", role=Role.EMPLOYEE)

    with pytest.raises(NotFoundError):
        service.get_employee(owner_actor, stranger.user_id)


def test_update_changes_role_and_profile(service, owner_actor, staff):
    updated = service.update_employee(owner_actor, staff.user_id, {"role": "manager", "position": " Lead ", "phone": ""})

    assert updated.role == Role.MANAGER
    assert updated.position == "Lead"
    assert updated.phone is None


def test_owner_role_is_protected(service, owner_actor, owner, staff):
    with pytest.raises(AuthorizationError):
        service.update_employee(owner_actor, owner.user_id, {"role": "admin"})
    with pytest.raises(AuthorizationError):
        service.update_employee(owner_actor, staff.user_id, {"role": "owner"})


def test_deactivate_rules(service, owner_actor, owner, staff, users):
    admin = users.add(company_id=owner.company_id, email="admin@acme.test", first_name="Al", last_name="Admin", role=Role.ADMIN)
    admin_actor = CurrentUser.from_user(admin)

    with pytest.raises(ValidationError):
        service.deactivate_employee(owner_actor, owner.user_id)
    with pytest.raises(AuthorizationError):
        service.deactivate_employee(admin_actor, owner.user_id)

    service.deactivate_employee(owner_actor, staff.user_id)
    assert users.get_by_id(staff.user_id).is_active is False

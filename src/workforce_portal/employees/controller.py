from __future__ import annotations

from flask import Flask, request

from ..auth.guards import build_guards, current_user
from ..common.responses import json_body, ok
from ..core.enums import Feature, Role


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    employees = container.employee_service
    invitations = container.invitation_service
    managers = (Role.OWNER, Role.ADMIN)

    @app.get("/api/employees", endpoint="employees_list")
    @guards.login_required
    @guards.feature_required(Feature.EMPLOYEES)
    def employees_list():
        args = request.args
        page = employees.list_employees(
            current_user(),
            page=args.get("page", 1),
            page_size=args.get("page_size") or args.get("limit") or None,
            role=args.get("role"),
            status=args.get("status"),
            search=args.get("search"),
        )
        return ok(page.to_dict())

    # Registered before /<int:user_id> so the literal path wins.
    @app.get("/api/employees/invitations", endpoint="employees_invitations")
    @guards.roles_required(*managers)
    def employees_invitations():
        items = invitations.list_invitations(current_user())
        return ok([i.to_dict() for i in items])

    @app.post("/api/employees/invite", endpoint="employees_invite")
    @guards.roles_required(*managers)
    @guards.feature_required(Feature.EMPLOYEES)
    def employees_invite():
        invitation = invitations.invite(current_user(), json_body())
        data = invitation.to_dict()
        data["token"] = invitation.token
        return ok(data, "Invitation sent", 201)

    @app.delete("/api/employees/invitations/<int:invitation_id>", endpoint="employees_cancel_invitation")
    @guards.roles_required(*managers)
    def employees_cancel_invitation(invitation_id: int):
        invitations.cancel(current_user(), invitation_id)
        return ok(None, "Invitation cancelled")

    @app.post("/api/employees/accept-invitation", endpoint="employees_accept_invitation")
    def employees_accept_invitation():
        payload = json_body()
        user = invitations.accept(payload.get("token"), payload.get("password"))
        return ok({"user": user.to_public_dict()}, "Invitation accepted. You can now log in.", 201)

    @app.get("/api/employees/<int:user_id>", endpoint="employees_get")
    @guards.login_required
    def employees_get(user_id: int):
        return ok(employees.get_employee(current_user(), user_id).to_public_dict())

    @app.patch("/api/employees/<int:user_id>", endpoint="employees_update")
    @guards.roles_required(*managers)
    def employees_update(user_id: int):
        user = employees.update_employee(current_user(), user_id, json_body())
        return ok(user.to_public_dict(), "Employee updated")

    @app.delete("/api/employees/<int:user_id>", endpoint="employees_deactivate")
    @guards.roles_required(*managers)
    def employees_deactivate(user_id: int):
        employees.deactivate_employee(current_user(), user_id)
        return ok(None, "Employee deactivated")

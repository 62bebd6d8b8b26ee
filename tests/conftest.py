from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fakes import (
    FakeAttendanceRepo,
    FakeCompanyRepo,
    FakeFileRepo,
    FakeInvitationRepo,
    FakeProgressRepo,
    FakeUserRepo,
)
from workforce_portal.auth.model import CurrentUser
from workforce_portal.auth.tokens import CookieSettings, TokenService
from workforce_portal.container import assemble_container
from workforce_portal.core.constants import ACCESS_COOKIE
from workforce_portal.core.enums import Role, SubscriptionPlan, SubscriptionStatus
from workforce_portal.files.storage import LocalFileStorage
from workforce_portal.main import create_app


class Clock:
    """Settable clock handed to services instead of utcnow."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    # Monday
    return Clock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def users():
    return FakeUserRepo()


@pytest.fixture
def companies():
    return FakeCompanyRepo()


@pytest.fixture
def invitations():
    return FakeInvitationRepo()


@pytest.fixture
def files():
    return FakeFileRepo()


@pytest.fixture
def progress():
    return FakeProgressRepo()


@pytest.fixture
def attendance(users):
    return FakeAttendanceRepo(users)


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def token_service():
    return TokenService("test-jwt-secret", cookies=CookieSettings(secure=False))


@pytest.fixture
def company(companies):
    return companies.add(
        name="Acme Ltd",
        email="owner@acme.test",
        company_size=5,
        subscription_plan=SubscriptionPlan.GOLD_MONTHLY,
        subscription_status=SubscriptionStatus.ACTIVE,
    )


@pytest.fixture
def owner(users, company):
    return users.add(
        company_id=company.company_id,
        email="owner@acme.test",
        first_name="Ada",
        last_name="Owner",
        role=Role.OWNER,
    )


@pytest.fixture
def owner_actor(owner):
    return CurrentUser.from_user(owner)


@pytest.fixture
def container(users, companies, invitations, files, progress, attendance, storage, token_service, clock):
    return assemble_container(
        users_repo=users,
        companies_repo=companies,
        invitations_repo=invitations,
        files_repo=files,
        progress_repo=progress,
        attendance_repo=attendance,
        storage=storage,
        token_service=token_service,
        clock=clock,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client, token_service):
    """Put an access cookie for ``user`` on the test client."""

    def _login(user):
        client.set_cookie(ACCESS_COOKIE, token_service.issue_access_token(user))
        return client

    return _login

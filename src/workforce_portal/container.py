from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Mapping, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.mysql_user_repository import MySQLUserRepository
from .auth.repository import UserRepository
from .auth.service import AuthService
from .auth.tokens import CookieSettings, TokenService
from .common.datetime_utils import utcnow
from .companies.features import parse_disabled_features
from .companies.mysql_company_repository import MySQLCompanyRepository
from .companies.repository import CompanyRepository
from .companies.service import CompanySettingsService, SubscriptionService
from .core.constants import ACCESS_TOKEN_MINUTES, REFRESH_TOKEN_DAYS, TRIAL_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_invitation_repository import MySQLInvitationRepository
from .employees.repository import InvitationRepository
from .employees.service import EmployeeService, InvitationService
from .files.mysql_file_repository import MySQLFileRepository
from .files.repository import FileRepository
from .files.service import FileService
from .files.storage import LocalFileStorage
from .onboarding.mysql_progress_repository import MySQLOnboardingProgressRepository
from .onboarding.repository import OnboardingProgressRepository
from .onboarding.service import OnboardingService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    companies_repo: CompanyRepository
    invitations_repo: InvitationRepository
    files_repo: FileRepository
    progress_repo: OnboardingProgressRepository
    attendance_repo: AttendanceRepository
    storage: LocalFileStorage

    token_service: TokenService
    auth_service: AuthService
    company_settings_service: CompanySettingsService
    subscription_service: SubscriptionService
    employee_service: EmployeeService
    invitation_service: InvitationService
    file_service: FileService
    onboarding_service: OnboardingService
    attendance_service: AttendanceService


def assemble_container(
    *,
    users_repo: UserRepository,
    companies_repo: CompanyRepository,
    invitations_repo: InvitationRepository,
    files_repo: FileRepository,
    progress_repo: OnboardingProgressRepository,
    attendance_repo: AttendanceRepository,
    storage: LocalFileStorage,
    token_service: TokenService,
    plan_prices: Optional[Mapping[str, int]] = None,
    trial_days: int = TRIAL_DAYS,
    disabled_features: Iterable[str] = (),
    clock: Callable[[], datetime] = utcnow,
) -> Container:
    """Wire services over the given repositories (MySQL in production, fakes in tests)."""

    auth_service = AuthService(users_repo, companies_repo, clock=clock)
    company_settings_service = CompanySettingsService(companies_repo)
    subscription_service = SubscriptionService(
        companies_repo,
        users_repo,
        invitations_repo,
        disabled_features=parse_disabled_features(disabled_features),
        clock=clock,
    )
    employee_service = EmployeeService(users_repo)
    invitation_service = InvitationService(invitations_repo, users_repo, companies_repo, clock=clock)
    file_service = FileService(files_repo, storage, companies_repo)
    onboarding_service = OnboardingService(
        companies_repo,
        users_repo,
        files_repo,
        progress_repo,
        file_service,
        plan_prices=plan_prices,
        trial_days=trial_days,
        clock=clock,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        companies_repo,
        strategy_factory=AttendanceStrategyFactory(),
        clock=clock,
    )

    return Container(
        users_repo=users_repo,
        companies_repo=companies_repo,
        invitations_repo=invitations_repo,
        files_repo=files_repo,
        progress_repo=progress_repo,
        attendance_repo=attendance_repo,
        storage=storage,
        token_service=token_service,
        auth_service=auth_service,
        company_settings_service=company_settings_service,
        subscription_service=subscription_service,
        employee_service=employee_service,
        invitation_service=invitation_service,
        file_service=file_service,
        onboarding_service=onboarding_service,
        attendance_service=attendance_service,
    )


def build_container(*, db_config: dict, settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    token_service = TokenService(
        getattr(settings, "JWT_SECRET"),
        access_minutes=int(getattr(settings, "ACCESS_TOKEN_MINUTES", ACCESS_TOKEN_MINUTES)),
        refresh_days=int(getattr(settings, "REFRESH_TOKEN_DAYS", REFRESH_TOKEN_DAYS)),
        cookies=CookieSettings(
            secure=bool(getattr(settings, "COOKIE_SECURE", False)),
            domain=getattr(settings, "COOKIE_DOMAIN", None),
        ),
    )

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        companies_repo=MySQLCompanyRepository(conn),
        invitations_repo=MySQLInvitationRepository(conn),
        files_repo=MySQLFileRepository(conn),
        progress_repo=MySQLOnboardingProgressRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        storage=LocalFileStorage(getattr(settings, "UPLOAD_FOLDER")),
        token_service=token_service,
        plan_prices=getattr(settings, "PLAN_PRICES", None),
        trial_days=int(getattr(settings, "TRIAL_DAYS", TRIAL_DAYS)),
        disabled_features=getattr(settings, "DISABLED_FEATURES", ()),
    )

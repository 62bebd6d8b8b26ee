from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Mapping, Optional, Union

from ..common.datetime_utils import parse_iso_date
from ..companies.features import has_feature
from ..core.constants import TRIAL_DAYS
from ..core.enums import Feature, PlanTier, Role, SubscriptionStatus

BANNER_ROLES = frozenset({Role.OWNER.value, Role.ADMIN.value})
BILLING_ROUTE = "/dashboard/settings/billing"


def plan_tier(plan: Optional[str], status: Optional[str] = None) -> PlanTier:
    """Tier for a plan name as the dashboard sees it."""
    if status == SubscriptionStatus.TRIAL.value or plan == PlanTier.TRIAL.value:
        return PlanTier.TRIAL
    if plan and "gold" in plan:
        return PlanTier.GOLD
    return PlanTier.SILVER


def has_feature_access(plan: Optional[str], feature: Union[Feature, str], status: Optional[str] = None) -> bool:
    try:
        wanted = Feature(feature)
    except ValueError:
        return False
    return has_feature(plan_tier(plan, status), wanted)


@dataclass(frozen=True)
class TrialBanner:
    days_remaining: int
    severity: str
    message: str
    progress_percent: float
    action_url: str = BILLING_ROUTE
    dismissed: bool = False

    @classmethod
    def from_status(cls, status: Mapping, role: str, today: date) -> Optional["TrialBanner"]:
        """Banner for the trial countdown, or None when nothing should show."""
        if role not in BANNER_ROLES:
            return None
        on_trial = (
            status.get("subscriptionStatus") == SubscriptionStatus.TRIAL.value
            or status.get("subscriptionPlan") == PlanTier.TRIAL.value
        )
        if not on_trial:
            return None

        end = status.get("trialEndDate")
        if end:
            days = (parse_iso_date(str(end)[:10]) - today).days
        elif status.get("trialDaysLeft") is not None:
            days = int(status["trialDaysLeft"])
        else:
            return None
        if days < 0:
            return None

        if days <= 3:
            severity = "critical"
        elif days <= 7:
            severity = "warning"
        else:
            severity = "info"

        if days == 0:
            message = f"Your {TRIAL_DAYS}-day trial ends today!"
        elif days == 1:
            message = f"Your {TRIAL_DAYS}-day trial ends tomorrow!"
        else:
            message = f"{days} days left in your {TRIAL_DAYS}-day trial"

        return cls(
            days_remaining=days,
            severity=severity,
            message=message,
            progress_percent=max(0.0, min(100.0, days * 100.0 / TRIAL_DAYS)),
        )

    def dismiss(self) -> "TrialBanner":
        return replace(self, dismissed=True)


@dataclass(frozen=True)
class EmployeeLimit:
    limit: int
    active: int
    pending: int
    tier: PlanTier

    @property
    def used(self) -> int:
        return self.active + self.pending

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def usage_percent(self) -> float:
        if self.limit <= 0:
            return 100.0
        return min(100.0, round(self.used * 100.0 / self.limit, 1))

    @property
    def can_add_more(self) -> bool:
        return self.remaining > 0

    @property
    def effective_tier(self) -> PlanTier:
        # Trials get gold features.
        return PlanTier.GOLD if self.tier == PlanTier.TRIAL else self.tier

    @classmethod
    def from_company_info(cls, info: Mapping) -> "EmployeeLimit":
        tier_value = info.get("planTier")
        try:
            tier = PlanTier(tier_value) if tier_value else plan_tier(info.get("subscriptionPlan"), info.get("subscriptionStatus"))
        except ValueError:
            tier = PlanTier.SILVER
        return cls(
            limit=int(info.get("employeeLimit") or 0),
            active=int(info.get("currentEmployeeCount") or 0),
            pending=int(info.get("pendingInvitationsCount") or 0),
            tier=tier,
        )

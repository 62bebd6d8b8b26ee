"""Plan tiers and the features each tier unlocks."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..core.enums import Feature, PlanTier, SubscriptionPlan, SubscriptionStatus
from .model import Company

_ALL_FEATURES = tuple(Feature)

PLAN_FEATURES: Dict[PlanTier, tuple] = {
    PlanTier.TRIAL: _ALL_FEATURES,
    PlanTier.SILVER: (
        Feature.ATTENDANCE,
        Feature.LEAVE,
        Feature.DEPARTMENTS,
        Feature.EMPLOYEES,
        Feature.AUDIT_LOGS,
    ),
    PlanTier.GOLD: _ALL_FEATURES,
}


def parse_disabled_features(values: Iterable[str]) -> FrozenSet[Feature]:
    """Unknown names are ignored so a stale setting cannot break startup."""
    disabled = set()
    for value in values:
        try:
            disabled.add(Feature(str(value).strip()))
        except ValueError:
            continue
    return frozenset(disabled)


def determine_company_plan(company: Optional[Company]) -> PlanTier:
    if company is None:
        return PlanTier.SILVER
    if company.subscription_status == SubscriptionStatus.TRIAL or company.subscription_plan == SubscriptionPlan.TRIAL:
        return PlanTier.TRIAL
    if "gold" in company.subscription_plan.value:
        return PlanTier.GOLD
    return PlanTier.SILVER


def enabled_features(tier: PlanTier, disabled: Iterable[Feature] = ()) -> List[Feature]:
    blocked = set(disabled)
    return [f for f in PLAN_FEATURES[tier] if f not in blocked]


def has_feature(tier: PlanTier, feature: Feature, disabled: Iterable[Feature] = ()) -> bool:
    return feature in enabled_features(tier, disabled)


def trial_days_left(company: Company, today: date) -> Optional[int]:
    """Whole days until the trial ends, rounded up and clamped at 0.

    None when the company is not on a trial or has no end date.
    """
    if company.trial_end_date is None:
        return None
    on_trial = (
        company.subscription_status == SubscriptionStatus.TRIAL
        or company.subscription_plan == SubscriptionPlan.TRIAL
    )
    if not on_trial:
        return None
    if isinstance(today, datetime):
        now = today if today.tzinfo else today.replace(tzinfo=timezone.utc)
    else:
        now = datetime.combine(today, time.min, tzinfo=timezone.utc)
    trial_end = datetime.combine(company.trial_end_date, time.min, tzinfo=timezone.utc)
    days = math.ceil((trial_end - now).total_seconds() / 86400)
    return max(0, days)

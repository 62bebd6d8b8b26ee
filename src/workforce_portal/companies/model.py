from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Dict, Optional

from ..common.datetime_utils import format_hhmm, iso_or_none
from ..core.constants import (
    DEFAULT_EARLY_DEPARTURE_MINUTES,
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_GRACE_MINUTES,
)
from ..core.enums import SubscriptionPlan, SubscriptionStatus

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def default_working_days() -> Dict[str, bool]:
    return {day: day not in ("saturday", "sunday") for day in WEEKDAYS}


@dataclass(frozen=True)
class Company:
    """Tenant record: profile, subscription and attendance settings."""

    company_id: int
    name: str
    email: Optional[str] = None
    industry: Optional[str] = None
    company_size: int = 0
    tax_id: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state_province: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    office_latitude: Optional[float] = None
    office_longitude: Optional[float] = None
    logo_url: Optional[str] = None

    subscription_plan: SubscriptionPlan = SubscriptionPlan.TRIAL
    subscription_status: SubscriptionStatus = SubscriptionStatus.TRIAL
    trial_start_date: Optional[date] = None
    trial_end_date: Optional[date] = None
    onboarding_completed: bool = False

    owner_first_name: Optional[str] = None
    owner_last_name: Optional[str] = None
    owner_email: Optional[str] = None
    owner_phone: Optional[str] = None
    owner_date_of_birth: Optional[date] = None

    work_start_time: time = time(9, 0)
    work_end_time: time = time(17, 0)
    working_days: Dict[str, bool] = field(default_factory=default_working_days)
    timezone: str = "UTC"
    grace_period_minutes: int = DEFAULT_GRACE_MINUTES
    early_departure_threshold_minutes: int = DEFAULT_EARLY_DEPARTURE_MINUTES
    geofence_radius_meters: int = DEFAULT_GEOFENCE_RADIUS_METERS
    require_geofence_for_clockin: bool = True
    allow_remote_clockin: bool = False
    notify_early_departure: bool = True

    created_at: Optional[datetime] = None

    @property
    def has_office_location(self) -> bool:
        return self.office_latitude is not None and self.office_longitude is not None

    @property
    def has_business_info(self) -> bool:
        return bool(self.tax_id and self.address)

    def settings_dict(self) -> dict:
        return {
            "companyId": self.company_id,
            "workStartTime": format_hhmm(self.work_start_time),
            "workEndTime": format_hhmm(self.work_end_time),
            "workingDays": dict(self.working_days),
            "timezone": self.timezone,
            "gracePeriodMinutes": self.grace_period_minutes,
            "earlyDepartureThresholdMinutes": self.early_departure_threshold_minutes,
            "geofenceRadiusMeters": self.geofence_radius_meters,
            "requireGeofenceForClockin": self.require_geofence_for_clockin,
            "allowRemoteClockin": self.allow_remote_clockin,
            "notifyEarlyDeparture": self.notify_early_departure,
            "officeLatitude": self.office_latitude,
            "officeLongitude": self.office_longitude,
            "address": self.address,
            "city": self.city,
            "stateProvince": self.state_province,
            "country": self.country,
            "postalCode": self.postal_code,
        }

    def profile_dict(self) -> dict:
        return {
            "id": self.company_id,
            "name": self.name,
            "email": self.email,
            "industry": self.industry,
            "companySize": self.company_size,
            "taxId": self.tax_id,
            "website": self.website,
            "logoUrl": self.logo_url,
            "subscriptionPlan": self.subscription_plan.value,
            "subscriptionStatus": self.subscription_status.value,
            "trialEndDate": iso_or_none(self.trial_end_date),
            "onboardingCompleted": self.onboarding_completed,
        }

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from ..auth.repository import UserRepository
from ..common.datetime_utils import iso_or_none, utcnow
from ..common.validators import (
    require_bool,
    require_coordinates,
    require_int,
    require_time_hhmm,
    require_timezone,
)
from ..core.constants import (
    MAX_GEOFENCE_RADIUS_METERS,
    MAX_THRESHOLD_MINUTES,
    MIN_GEOFENCE_RADIUS_METERS,
)
from ..core.enums import Feature
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import InvitationRepository
from .features import determine_company_plan, enabled_features, has_feature, trial_days_left
from .model import WEEKDAYS, Company
from .repository import CompanyRepository

logger = logging.getLogger(__name__)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CompanySettingsService:
    """Use case: read and change the attendance-related settings of a company."""

    def __init__(self, companies: CompanyRepository):
        self._companies = companies

    def get_company(self, company_id: Optional[int]) -> Company:
        company = self._companies.get_by_id(company_id) if company_id is not None else None
        if not company:
            raise NotFoundError("Company not found")
        return company

    def get_settings(self, company_id: Optional[int]) -> dict:
        return self.get_company(company_id).settings_dict()

    def _apply(self, company_id: int, changes: Dict[str, Any], area: str) -> dict:
        if not changes:
            raise ValidationError("No valid fields to update")
        self._companies.update_fields(company_id, changes)
        logger.info("Company %s updated %s settings: %s", company_id, area, ", ".join(sorted(changes)))
        return self.get_settings(company_id)

    def update_work_schedule(self, company_id: int, updates: Mapping[str, Any]) -> dict:
        company = self.get_company(company_id)
        changes: Dict[str, Any] = {}

        if updates.get("workStartTime"):
            changes["work_start_time"] = require_time_hhmm(updates["workStartTime"], "workStartTime")
        if updates.get("workEndTime"):
            changes["work_end_time"] = require_time_hhmm(updates["workEndTime"], "workEndTime")
        if "work_start_time" in changes or "work_end_time" in changes:
            start = changes.get("work_start_time", company.work_start_time)
            end = changes.get("work_end_time", company.work_end_time)
            if start >= end:
                raise ValidationError("Work start time must be before work end time")

        if updates.get("workingDays") is not None:
            days = updates["workingDays"]
            if not isinstance(days, dict):
                raise ValidationError("workingDays must be an object of weekday flags")
            merged = dict(company.working_days)
            for day, enabled in days.items():
                key = str(day).lower()
                if key not in WEEKDAYS:
                    raise ValidationError(f"Unknown weekday: {day}")
                merged[key] = require_bool(enabled, f"workingDays.{key}")
            changes["working_days"] = merged

        if updates.get("timezone"):
            changes["timezone"] = require_timezone(updates["timezone"], "timezone")

        return self._apply(company_id, changes, "work schedule")

    def update_attendance_settings(self, company_id: int, updates: Mapping[str, Any]) -> dict:
        self.get_company(company_id)
        changes: Dict[str, Any] = {}

        if updates.get("gracePeriodMinutes") is not None:
            changes["grace_period_minutes"] = require_int(
                updates["gracePeriodMinutes"], "gracePeriodMinutes", min_value=0, max_value=MAX_THRESHOLD_MINUTES
            )
        if updates.get("earlyDepartureThresholdMinutes") is not None:
            changes["early_departure_threshold_minutes"] = require_int(
                updates["earlyDepartureThresholdMinutes"],
                "earlyDepartureThresholdMinutes",
                min_value=0,
                max_value=MAX_THRESHOLD_MINUTES,
            )
        if updates.get("geofenceRadiusMeters") is not None:
            changes["geofence_radius_meters"] = require_int(
                updates["geofenceRadiusMeters"],
                "geofenceRadiusMeters",
                min_value=MIN_GEOFENCE_RADIUS_METERS,
                max_value=MAX_GEOFENCE_RADIUS_METERS,
            )

        flags = {
            "requireGeofenceForClockin": "require_geofence_for_clockin",
            "allowRemoteClockin": "allow_remote_clockin",
            "notifyEarlyDeparture": "notify_early_departure",
        }
        for key, column in flags.items():
            if updates.get(key) is not None:
                changes[column] = require_bool(updates[key], key)

        return self._apply(company_id, changes, "attendance")

    def update_location(self, company_id: int, updates: Mapping[str, Any]) -> dict:
        self.get_company(company_id)
        changes: Dict[str, Any] = {}

        has_lat = updates.get("latitude") is not None
        has_lon = updates.get("longitude") is not None
        if has_lat != has_lon:
            raise ValidationError("Latitude and longitude must be provided together")
        if has_lat:
            lat, lon = require_coordinates(updates["latitude"], updates["longitude"])
            changes["office_latitude"] = lat
            changes["office_longitude"] = lon

        text_fields = {
            "address": "address",
            "city": "city",
            "stateProvince": "state_province",
            "country": "country",
            "postalCode": "postal_code",
        }
        for key, column in text_fields.items():
            if key in updates:
                changes[column] = _optional_text(updates[key])

        return self._apply(company_id, changes, "location")


class SubscriptionService:
    """Use case: subscription state, employee limits and feature gating."""

    def __init__(
        self,
        companies: CompanyRepository,
        users: UserRepository,
        invitations: InvitationRepository,
        *,
        disabled_features: Iterable[Feature] = (),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._companies = companies
        self._users = users
        self._invitations = invitations
        self._disabled = frozenset(disabled_features)
        self._clock = clock

    def _company(self, company_id: Optional[int]) -> Company:
        company = self._companies.get_by_id(company_id) if company_id is not None else None
        if not company:
            raise NotFoundError("Company not found")
        return company

    def subscription_status(self, company_id: Optional[int]) -> dict:
        company = self._company(company_id)
        return {
            "subscriptionPlan": company.subscription_plan.value,
            "subscriptionStatus": company.subscription_status.value,
            "trialStartDate": iso_or_none(company.trial_start_date),
            "trialEndDate": iso_or_none(company.trial_end_date),
            "trialDaysLeft": trial_days_left(company, self._clock()),
        }

    def subscription_info(self, company_id: Optional[int]) -> dict:
        company = self._company(company_id)
        tier = determine_company_plan(company)
        return {
            "subscriptionPlan": tier.value,
            "subscriptionStatus": company.subscription_status.value,
            "trialDaysLeft": trial_days_left(company, self._clock()),
            "features": [f.value for f in enabled_features(tier, self._disabled)],
        }

    def company_info(self, company_id: Optional[int]) -> dict:
        company = self._company(company_id)
        info = company.profile_dict()
        info.update(
            {
                "employeeLimit": company.company_size,
                "currentEmployeeCount": self._users.count_active(company.company_id),
                "pendingInvitationsCount": self._invitations.count_pending(company.company_id, now=self._clock()),
                "planTier": determine_company_plan(company).value,
            }
        )
        return info

    def can_use(self, company_id: Optional[int], feature: Feature) -> bool:
        company = self._companies.get_by_id(company_id) if company_id is not None else None
        return has_feature(determine_company_plan(company), feature, self._disabled)

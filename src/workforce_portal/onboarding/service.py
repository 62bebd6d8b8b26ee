from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional

from ..auth.model import CurrentUser
from ..auth.repository import UserRepository
from ..common.datetime_utils import iso_or_none, utcnow
from ..common.validators import (
    optional_url,
    require_bool,
    require_choice,
    require_coordinates,
    require_email,
    require_int,
    require_iso_date,
    require_min_length,
    require_non_empty,
)
from ..companies.model import Company
from ..companies.repository import CompanyRepository
from ..core.constants import DEFAULT_PLAN_PRICES, LOGO_MIME_TYPES, MAX_LOGO_BYTES, REQUIRED_DOCUMENTS, TRIAL_DAYS
from ..core.enums import DocumentType, OnboardingStep, SubscriptionPlan, SubscriptionStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..files.repository import FileRepository
from ..files.service import FileService
from .model import OnboardingProgress, merge_steps
from .repository import OnboardingProgressRepository

logger = logging.getLogger(__name__)

SELECTABLE_PLANS = (
    SubscriptionPlan.SILVER_MONTHLY,
    SubscriptionPlan.SILVER_YEARLY,
    SubscriptionPlan.GOLD_MONTHLY,
    SubscriptionPlan.GOLD_YEARLY,
    SubscriptionPlan.FREE,
)

# formData keys the wizard uses for each attached document.
DOCUMENT_FORM_KEYS = {
    DocumentType.CAC: "cacDocument",
    DocumentType.PROOF_OF_ADDRESS: "proofOfAddress",
    DocumentType.COMPANY_POLICY: "companyPolicies",
}


class OnboardingService:
    """Use case: walk a freshly registered company through setup."""

    def __init__(
        self,
        companies: CompanyRepository,
        users: UserRepository,
        files: FileRepository,
        progress: OnboardingProgressRepository,
        file_service: FileService,
        *,
        plan_prices: Optional[Mapping[str, int]] = None,
        trial_days: int = TRIAL_DAYS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._companies = companies
        self._users = users
        self._files = files
        self._progress = progress
        self._file_service = file_service
        self._plan_prices = dict(plan_prices or DEFAULT_PLAN_PRICES)
        self._trial_days = trial_days
        self._clock = clock

    def _company(self, actor: CurrentUser) -> Company:
        company = self._companies.get_by_id(actor.company_id) if actor.company_id is not None else None
        if not company:
            raise NotFoundError("Company not found. Please complete registration first.")
        return company

    def _missing_documents(self, company_id: int) -> list:
        attached = {cf.document_type for cf in self._files.list_company_files(company_id)}
        return [d for d in REQUIRED_DOCUMENTS if d not in attached]

    def company_setup(self, actor: CurrentUser, payload: Mapping[str, Any]) -> dict:
        company = self._company(actor)
        first_name = require_min_length(payload.get("firstName"), "First name", 2)
        last_name = require_min_length(payload.get("lastName"), "Last name", 2)
        phone = require_min_length(payload.get("phoneNumber"), "Phone number", 10)
        date_of_birth = require_iso_date(payload.get("dateOfBirth"), "Date of birth")
        is_owner = require_bool(payload.get("isOwner"), "isOwner")

        self._users.update_fields(
            actor.user_id,
            {"first_name": first_name, "last_name": last_name, "phone": phone, "date_of_birth": date_of_birth},
        )
        if is_owner:
            self._companies.update_fields(
                company.company_id,
                {
                    "owner_first_name": first_name,
                    "owner_last_name": last_name,
                    "owner_email": actor.email,
                    "owner_phone": phone,
                    "owner_date_of_birth": date_of_birth,
                },
            )

        next_step = OnboardingStep.BUSINESS_INFO if is_owner else OnboardingStep.OWNER_DETAILS
        logger.info("Company setup saved for company %s (registrant is owner: %s)", company.company_id, is_owner)
        return {"isOwner": is_owner, "nextStep": int(next_step)}

    def owner_details(self, actor: CurrentUser, payload: Mapping[str, Any]) -> dict:
        company = self._company(actor)
        if company.owner_email and company.owner_email == actor.email:
            raise ValidationError("Owner details are only needed when the registrant is not the owner")

        changes = {
            "owner_first_name": require_min_length(payload.get("ownerFirstName"), "Owner first name", 2),
            "owner_last_name": require_min_length(payload.get("ownerLastName"), "Owner last name", 2),
            "owner_email": require_email(payload.get("ownerEmail"), "Owner email"),
            "owner_phone": require_min_length(payload.get("ownerPhone"), "Owner phone", 10),
            "owner_date_of_birth": require_iso_date(payload.get("ownerDateOfBirth"), "Owner date of birth"),
        }
        self._companies.update_fields(company.company_id, changes)
        logger.info("Owner details saved for company %s", company.company_id)
        return {"nextStep": int(OnboardingStep.BUSINESS_INFO)}

    def business_info(self, actor: CurrentUser, payload: Mapping[str, Any]) -> dict:
        company = self._company(actor)
        changes: Dict[str, Any] = {
            "name": require_min_length(payload.get("companyName"), "Company name", 2),
            "tax_id": require_non_empty(payload.get("taxId"), "Tax ID"),
            "company_size": require_int(payload.get("employeeCount"), "Employee count", min_value=1),
            "website": optional_url(payload.get("website"), "Website"),
            "address": require_min_length(payload.get("address"), "Address", 5),
            "city": require_min_length(payload.get("city"), "City", 2),
            "state_province": require_min_length(payload.get("stateProvince"), "State/Province", 2),
            "country": require_min_length(payload.get("country"), "Country", 2),
            "postal_code": require_min_length(payload.get("postalCode"), "Postal code", 3),
        }
        if payload.get("industry"):
            changes["industry"] = str(payload["industry"]).strip()
        lat = payload.get("officeLatitude")
        lon = payload.get("officeLongitude")
        if lat is not None or lon is not None:
            changes["office_latitude"], changes["office_longitude"] = require_coordinates(lat, lon)

        self._companies.update_fields(company.company_id, changes)
        logger.info("Business info saved for company %s", company.company_id)
        return {"companyId": company.company_id, "nextStep": int(OnboardingStep.LOGO)}

    def upload_logo(self, actor: CurrentUser, *, content: bytes, filename: str, mime_type: str) -> dict:
        company = self._company(actor)
        result = self._file_service.upload(
            actor,
            content=content,
            filename=filename,
            mime_type=mime_type,
            allowed_types=LOGO_MIME_TYPES,
            max_bytes=MAX_LOGO_BYTES,
        )
        self._files.attach(
            company_id=company.company_id,
            file_id=result.file.file_id,
            document_type=DocumentType.LOGO,
            attached_by=actor.user_id,
            purpose="Company logo",
        )
        self._companies.update_fields(company.company_id, {"logo_url": result.file.url})
        logger.info("Logo set for company %s (file %s)", company.company_id, result.file.file_id)
        return {"logoUrl": result.file.url, "fileId": result.file.file_id, "deduplicated": result.deduplicated}

    def select_plan(self, actor: CurrentUser, payload: Mapping[str, Any]) -> dict:
        company = self._company(actor)
        plan = require_choice(payload.get("plan"), SubscriptionPlan, "plan", allowed=SELECTABLE_PLANS)
        size = require_int(payload.get("companySize"), "Company size", min_value=1)

        price_per_employee = int(self._plan_prices.get(plan.value, 0))
        changes: Dict[str, Any] = {"subscription_plan": plan, "company_size": size}
        trial_end = None

        if plan == SubscriptionPlan.FREE:
            price_per_employee = 0
            changes["subscription_status"] = SubscriptionStatus.ACTIVE
        elif plan.value.startswith("gold"):
            today = self._clock().date()
            trial_end = today + timedelta(days=self._trial_days)
            changes.update(
                {
                    "subscription_status": SubscriptionStatus.TRIAL,
                    "trial_start_date": today,
                    "trial_end_date": trial_end,
                }
            )
        else:
            changes["subscription_status"] = SubscriptionStatus.PENDING_PAYMENT

        self._companies.update_fields(company.company_id, changes)
        logger.info("Company %s selected plan %s for %d employees", company.company_id, plan.value, size)
        return {
            "plan": plan.value,
            "subscriptionStatus": changes["subscription_status"].value,
            "pricePerEmployee": price_per_employee,
            "totalPrice": price_per_employee * size,
            "trialEndDate": iso_or_none(trial_end),
        }

    def status(self, actor: CurrentUser) -> dict:
        company = self._company(actor)
        missing = self._missing_documents(company.company_id)
        return {
            "completed": company.onboarding_completed,
            "hasDocuments": not missing,
            "hasPlan": company.subscription_plan != SubscriptionPlan.TRIAL,
            "hasBusinessInfo": company.has_business_info,
            "missingDocuments": [d.value for d in missing],
        }

    def complete(self, actor: CurrentUser) -> dict:
        company = self._company(actor)
        state = self.status(actor)

        missing = []
        if not state["hasBusinessInfo"]:
            missing.append("business information")
        missing.extend(f"document: {d}" for d in state["missingDocuments"])
        if not state["hasPlan"]:
            missing.append("subscription plan")
        if missing:
            raise ValidationError(
                f"Cannot complete onboarding. Missing: {', '.join(missing)}",
                details={"missing": missing},
            )

        self._companies.update_fields(company.company_id, {"onboarding_completed": True})
        self._progress.delete(actor.user_id)
        logger.info("Onboarding completed for company %s", company.company_id)
        return {"companyId": company.company_id, "redirectUrl": "/dashboard"}

    def save_progress(self, actor: CurrentUser, payload: Mapping[str, Any]) -> OnboardingProgress:
        first, last = int(OnboardingStep.REGISTRATION), int(OnboardingStep.COMPLETE)
        current_step = require_int(payload.get("currentStep"), "currentStep", min_value=first, max_value=last)

        raw_steps = payload.get("completedSteps") or []
        if not isinstance(raw_steps, list):
            raise ValidationError("completedSteps must be a list")
        steps = [require_int(s, "completedSteps", min_value=first, max_value=last) for s in raw_steps]

        form_data = payload.get("formData") or {}
        if not isinstance(form_data, dict):
            raise ValidationError("formData must be an object")

        existing = self._progress.get(actor.user_id)
        progress = OnboardingProgress(
            user_id=actor.user_id,
            company_id=actor.company_id,
            current_step=current_step,
            completed_steps=merge_steps(existing.completed_steps if existing else (), steps),
            form_data=dict(form_data),
            last_saved_at=self._clock(),
        )
        self._progress.upsert(progress)
        logger.debug("Onboarding progress saved for user %s at step %s", actor.user_id, current_step)
        return progress

    def get_progress(self, actor: CurrentUser) -> dict:
        progress = self._progress.get(actor.user_id)
        if not progress:
            raise NotFoundError("No onboarding progress found")

        data = progress.to_dict()
        form_data = data["formData"]
        company_id = progress.company_id or actor.company_id
        company = self._companies.get_by_id(company_id) if company_id is not None else None
        if company:
            if company.logo_url:
                form_data["companyLogo"] = company.logo_url
            for cf in self._files.list_company_files(company.company_id):
                key = DOCUMENT_FORM_KEYS.get(cf.document_type)
                if key:
                    form_data[key] = {
                        "fileId": cf.file.file_id,
                        "url": cf.file.url,
                        "filename": cf.file.original_filename,
                        "size": cf.file.size,
                        "uploaded": True,
                    }
        return data

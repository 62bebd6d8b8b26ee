"""Onboarding wizard driven over the REST API.

Form state is written to the local store on every change and on every step
transition, then mirrored to ``/api/onboarding/save-progress``. A failed
server save never rolls back what the user already entered locally.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.enums import DocumentType, OnboardingStep
from .documents import DocumentUploader
from .errors import ApiError, StepValidationError
from .http import ApiClient
from .storage import ONBOARDING_AUTH_KEY, ONBOARDING_STATE_KEY, LocalStore

logger = logging.getLogger(__name__)

FIRST_STEP = OnboardingStep.COMPANY_SETUP
FINAL_STEP = OnboardingStep.COMPLETE
DEFAULT_ROUTE = "/onboarding/company-setup"
DASHBOARD_ROUTE = "/dashboard"

STEP_ROUTES = {
    OnboardingStep.COMPANY_SETUP: "/onboarding/company-setup",
    OnboardingStep.OWNER_DETAILS: "/onboarding/owner-details",
    OnboardingStep.BUSINESS_INFO: "/onboarding/business-info",
    OnboardingStep.LOGO: "/onboarding/logo",
    OnboardingStep.DOCUMENTS: "/onboarding/documents",
    OnboardingStep.PLAN: "/onboarding/subscription",
    OnboardingStep.COMPLETE: "/onboarding/complete",
}

REQUIRED_FIELDS: Dict[OnboardingStep, tuple] = {
    OnboardingStep.COMPANY_SETUP: ("firstName", "lastName", "phoneNumber", "dateOfBirth", "isOwner"),
    OnboardingStep.OWNER_DETAILS: ("ownerFirstName", "ownerLastName", "ownerEmail", "ownerPhone", "ownerDateOfBirth"),
    OnboardingStep.BUSINESS_INFO: (
        "companyName",
        "taxId",
        "employeeCount",
        "address",
        "city",
        "stateProvince",
        "country",
        "postalCode",
    ),
    OnboardingStep.LOGO: ("companyLogo",),
    OnboardingStep.DOCUMENTS: ("cacDocument", "proofOfAddress", "companyPolicies"),
    OnboardingStep.PLAN: ("plan", "companySize"),
    OnboardingStep.COMPLETE: (),
}

DOCUMENT_FIELDS = {
    "cacDocument": DocumentType.CAC,
    "proofOfAddress": DocumentType.PROOF_OF_ADDRESS,
    "companyPolicies": DocumentType.COMPANY_POLICY,
}

_SUBMIT_PATHS = {
    OnboardingStep.COMPANY_SETUP: "/api/onboarding/company-setup",
    OnboardingStep.OWNER_DETAILS: "/api/onboarding/owner-details",
    OnboardingStep.BUSINESS_INFO: "/api/onboarding/business-info",
    OnboardingStep.PLAN: "/api/onboarding/select-plan",
}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class OnboardingWizard:
    def __init__(self, client: ApiClient, store: LocalStore, *, uploader: Optional[DocumentUploader] = None):
        self._client = client
        self._store = store
        self._uploader = uploader or DocumentUploader(client, store)
        self._state = self._load_state()
        self.completion: Optional[dict] = None

    def _load_state(self) -> dict:
        state = self._store.get(ONBOARDING_STATE_KEY)
        if isinstance(state, dict):
            return {
                "currentStep": int(state.get("currentStep") or FIRST_STEP),
                "completedSteps": sorted({int(s) for s in state.get("completedSteps") or []}),
                "formData": dict(state.get("formData") or {}),
            }
        return {"currentStep": int(FIRST_STEP), "completedSteps": [], "formData": {}}

    def _persist(self) -> None:
        self._store.set(ONBOARDING_STATE_KEY, self._state)

    @property
    def current_step(self) -> OnboardingStep:
        return OnboardingStep(self._state["currentStep"])

    @property
    def completed_steps(self) -> List[int]:
        return list(self._state["completedSteps"])

    @property
    def form_data(self) -> dict:
        return dict(self._state["formData"])

    @property
    def auth(self) -> Optional[dict]:
        return self._store.get_auth()

    @property
    def is_owner(self) -> bool:
        return bool(self._state["formData"].get("isOwner"))

    def register(self, *, email: str, password: str, first_name: str, last_name: str, company_name: str) -> dict:
        data = self._client.post(
            "/api/auth/register",
            json={
                "email": email,
                "password": password,
                "firstName": first_name,
                "lastName": last_name,
                "companyName": company_name,
            },
        )["data"]
        self._store.set(
            ONBOARDING_AUTH_KEY,
            {"userId": data["userId"], "companyId": data.get("companyId"), "email": data.get("email", email)},
        )
        self._state = {
            "currentStep": int(FIRST_STEP),
            "completedSteps": [int(OnboardingStep.REGISTRATION)],
            "formData": {"firstName": first_name, "lastName": last_name, "companyName": company_name},
        }
        self._persist()
        self._client.navigate(STEP_ROUTES[FIRST_STEP])
        return data

    def update(self, **fields: Any) -> dict:
        """Merge form fields and persist them locally straight away."""
        self._state["formData"].update(fields)
        self._persist()
        return self.form_data

    def missing_fields(self, step: Optional[OnboardingStep] = None) -> List[str]:
        step = step or self.current_step
        data = self._state["formData"]
        return [name for name in REQUIRED_FIELDS.get(step, ()) if _is_blank(data.get(name))]

    def _next_step(self, step: OnboardingStep) -> OnboardingStep:
        nxt = OnboardingStep(step + 1)
        if nxt == OnboardingStep.OWNER_DETAILS and self.is_owner:
            nxt = OnboardingStep.BUSINESS_INFO
        return nxt

    def _previous_step(self, step: OnboardingStep) -> OnboardingStep:
        if step <= FIRST_STEP:
            return FIRST_STEP
        prev = OnboardingStep(step - 1)
        if prev == OnboardingStep.OWNER_DETAILS and self.is_owner:
            prev = OnboardingStep.COMPANY_SETUP
        return prev

    def advance(self) -> OnboardingStep:
        step = self.current_step
        missing = self.missing_fields(step)
        if missing:
            raise StepValidationError(int(step), missing)

        self._submit(step)

        self._state["completedSteps"] = sorted(set(self._state["completedSteps"]) | {int(step)})
        if step == FINAL_STEP:
            self._persist()
            return step

        nxt = self._next_step(step)
        self._state["currentStep"] = int(nxt)
        self._persist()
        self._client.navigate(STEP_ROUTES[nxt])
        self.save_remote()
        return nxt

    def back(self) -> OnboardingStep:
        prev = self._previous_step(self.current_step)
        self._state["currentStep"] = int(prev)
        self._persist()
        self._client.navigate(STEP_ROUTES[prev])
        return prev

    def save_remote(self) -> bool:
        try:
            self._client.post(
                "/api/onboarding/save-progress",
                json={
                    "currentStep": self._state["currentStep"],
                    "completedSteps": self._state["completedSteps"],
                    "formData": self._state["formData"],
                },
            )
        except ApiError as exc:
            logger.warning("Could not save onboarding progress to server: %s", exc)
            return False
        return True

    def resume(self) -> str:
        """Load the freshest progress and return the route the user belongs on."""
        try:
            remote = self._client.get("/api/onboarding/progress")["data"]
        except ApiError as exc:
            if exc.status != 404:
                logger.warning("Falling back to local onboarding state: %s", exc)
            remote = None

        if remote:
            form_data = dict(self._state["formData"])
            form_data.update(remote.get("formData") or {})
            self._state = {
                "currentStep": int(remote.get("currentStep") or FIRST_STEP),
                "completedSteps": sorted(
                    {int(s) for s in remote.get("completedSteps") or []} | set(self._state["completedSteps"])
                ),
                "formData": form_data,
            }
            self._persist()

        last_completed = max(self._state["completedSteps"], default=0)
        route = DASHBOARD_ROUTE if last_completed >= FINAL_STEP else DEFAULT_ROUTE
        self._client.navigate(route)
        return route

    def _submit(self, step: OnboardingStep) -> None:
        data = self._state["formData"]
        if step in _SUBMIT_PATHS:
            payload = {name: data.get(name) for name in REQUIRED_FIELDS[step]}
            if step == OnboardingStep.BUSINESS_INFO:
                for name in ("industry", "website", "officeLatitude", "officeLongitude"):
                    if not _is_blank(data.get(name)):
                        payload[name] = data[name]
            result = self._client.post(_SUBMIT_PATHS[step], json=payload)["data"] or {}
            if step == OnboardingStep.BUSINESS_INFO and result.get("companyId"):
                self._store.update(ONBOARDING_AUTH_KEY, companyId=result["companyId"])
            if step == OnboardingStep.PLAN:
                data["planSelection"] = result
        elif step == OnboardingStep.LOGO:
            self._upload_logo(data)
        elif step == OnboardingStep.DOCUMENTS:
            self._upload_documents(data)
        elif step == OnboardingStep.COMPLETE:
            self.completion = self._client.post("/api/onboarding/complete", json={})["data"]

    def _upload_logo(self, data: dict) -> None:
        logo = data["companyLogo"]
        if not isinstance(logo, str) or logo.startswith("/api/"):
            return
        path = Path(logo)
        result = self._client.post(
            "/api/onboarding/upload-logo",
            files={"logo": (path.name, path.read_bytes(), _guess_mime(path))},
        )["data"]
        data["companyLogo"] = result["logoUrl"]

    def _upload_documents(self, data: dict) -> None:
        auth = self.auth or {}
        for field_name, doc_type in DOCUMENT_FIELDS.items():
            value = data[field_name]
            if isinstance(value, dict) and value.get("uploaded"):
                continue
            outcome = self._uploader.upload_document(auth.get("companyId"), doc_type.value, value)
            auth["companyId"] = outcome.company_id
            data[field_name] = {
                "fileId": outcome.file_id,
                "url": outcome.url,
                "filename": Path(value).name,
                "uploaded": True,
            }
            self._persist()


def _guess_mime(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"

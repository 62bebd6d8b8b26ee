from __future__ import annotations

import pytest

from workforce_portal.client import ApiError, LocalStore, OnboardingWizard, StepValidationError, UploadOutcome
from workforce_portal.client.storage import ONBOARDING_AUTH_KEY, ONBOARDING_STATE_KEY
from workforce_portal.core.enums import OnboardingStep

COMPANY_SETUP = {
    "firstName": "Grace",
    "lastName": "Hopper",
    "phoneNumber": "08012345678",
    "dateOfBirth": "1990-05-01",
}


class FakeApi:
    """Records calls and answers with canned ``data`` per path."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.current_path = "/"

    def navigate(self, path):
        self.current_path = path

    def _answer(self, method, path, kwargs):
        self.calls.append((method, path, kwargs.get("json")))
        answer = self.responses.get(path, {})
        if isinstance(answer, Exception):
            raise answer
        return {"success": True, "data": answer}

    def get(self, path, **kwargs):
        return self._answer("GET", path, kwargs)

    def post(self, path, **kwargs):
        return self._answer("POST", path, kwargs)

    def paths(self):
        return [path for _, path, _ in self.calls]


class FakeUploader:
    def __init__(self):
        self.uploaded = []

    def upload_document(self, company_id, document_type, path):
        self.uploaded.append((company_id, document_type, str(path)))
        file_id = len(self.uploaded)
        return UploadOutcome(file_id=file_id, company_id=company_id, reused=False, url=f"/api/files/{file_id}/content")


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "browser-storage.json")


@pytest.fixture
def api():
    return FakeApi({"/api/auth/register": {"userId": 3, "companyId": 9, "email": "grace@newco.test"}})


@pytest.fixture
def wizard(api, store):
    wizard = OnboardingWizard(api, store, uploader=FakeUploader())
    wizard.register(
        email="grace@newco.test", password="Sup3r-secret", first_name="Grace", last_name="Hopper", company_name="NewCo"
    )
    return wizard


def test_register_starts_at_company_setup(wizard, store, api):
    assert wizard.current_step == OnboardingStep.COMPANY_SETUP
    assert wizard.completed_steps == [1]
    assert store.get_auth() == {"userId": 3, "companyId": 9, "email": "grace@newco.test"}
    assert api.current_path == "/onboarding/company-setup"


def test_updates_survive_a_reload(wizard, api, store):
    wizard.update(phoneNumber="08012345678")

    reloaded = OnboardingWizard(api, store)

    assert reloaded.form_data["phoneNumber"] == "08012345678"
    assert reloaded.current_step == OnboardingStep.COMPANY_SETUP


def test_advance_reports_missing_fields(wizard, api):
    wizard.update(phoneNumber="   ")

    with pytest.raises(StepValidationError) as exc:
        wizard.advance()

    assert exc.value.missing == ["phoneNumber", "dateOfBirth", "isOwner"]
    assert wizard.current_step == OnboardingStep.COMPANY_SETUP
    assert "/api/onboarding/company-setup" not in api.paths()


def test_owner_skips_owner_details(wizard, api, store):
    wizard.update(**COMPANY_SETUP, isOwner=True)

    assert wizard.advance() == OnboardingStep.BUSINESS_INFO
    assert api.current_path == "/onboarding/business-info"
    assert wizard.completed_steps == [1, 2]
    assert store.get(ONBOARDING_STATE_KEY)["currentStep"] == 4
    assert api.calls[-1] == (
        "POST",
        "/api/onboarding/save-progress",
        {"currentStep": 4, "completedSteps": [1, 2], "formData": wizard.form_data},
    )

    assert wizard.back() == OnboardingStep.COMPANY_SETUP


def test_non_owner_goes_to_owner_details(wizard):
    wizard.update(**COMPANY_SETUP, isOwner=False)

    assert wizard.advance() == OnboardingStep.OWNER_DETAILS
    assert wizard.back() == OnboardingStep.COMPANY_SETUP
    assert wizard.back() == OnboardingStep.COMPANY_SETUP


def test_failed_remote_save_keeps_local_state(wizard, api, store):
    api.responses["/api/onboarding/save-progress"] = ApiError("Internal server error", status=500)
    wizard.update(**COMPANY_SETUP, isOwner=True)

    wizard.advance()

    assert store.get(ONBOARDING_STATE_KEY)["currentStep"] == 4
    assert wizard.save_remote() is False


def test_business_info_updates_company_id(wizard, api, store):
    api.responses["/api/onboarding/business-info"] = {"companyId": 15, "nextStep": 5}
    wizard.update(**COMPANY_SETUP, isOwner=True)
    wizard.advance()
    wizard.update(
        companyName="NewCo Logistics",
        taxId="TX-1",
        employeeCount=12,
        address="12 Marina Road",
        city="Lagos",
        stateProvince="Lagos",
        country="Nigeria",
        postalCode="101001",
        website="",
    )

    assert wizard.advance() == OnboardingStep.LOGO
    sent = next(body for _, path, body in api.calls if path == "/api/onboarding/business-info")
    assert "website" not in sent
    assert store.get(ONBOARDING_AUTH_KEY)["companyId"] == 15


def test_documents_step_replaces_paths_with_descriptors(api, store, tmp_path):
    uploader = FakeUploader()
    store.set(ONBOARDING_AUTH_KEY, {"userId": 3, "companyId": 9})
    store.set(
        ONBOARDING_STATE_KEY,
        {
            "currentStep": int(OnboardingStep.DOCUMENTS),
            "completedSteps": [1, 2, 4, 5],
            "formData": {
                "cacDocument": str(tmp_path / "cac.pdf"),
                "proofOfAddress": {"fileId": 7, "url": "/api/files/7/content", "uploaded": True},
                "companyPolicies": str(tmp_path / "policy.pdf"),
            },
        },
    )
    wizard = OnboardingWizard(api, store, uploader=uploader)

    assert wizard.advance() == OnboardingStep.PLAN
    assert [doc_type for _, doc_type, _ in uploader.uploaded] == ["cac", "company_policy"]
    assert wizard.form_data["cacDocument"] == {
        "fileId": 1,
        "url": "/api/files/1/content",
        "filename": "cac.pdf",
        "uploaded": True,
    }
    assert wizard.form_data["proofOfAddress"]["fileId"] == 7


def test_final_step_completes_without_moving(api, store):
    api.responses["/api/onboarding/complete"] = {"companyId": 9, "redirectUrl": "/dashboard"}
    store.set(ONBOARDING_STATE_KEY, {"currentStep": 8, "completedSteps": [1, 2, 4, 5, 6, 7], "formData": {}})
    wizard = OnboardingWizard(api, store)

    assert wizard.advance() == OnboardingStep.COMPLETE
    assert wizard.completion["redirectUrl"] == "/dashboard"
    assert wizard.completed_steps == [1, 2, 4, 5, 6, 7, 8]
    assert "/api/onboarding/save-progress" not in api.paths()


def test_resume_merges_server_progress(api, store):
    store.set(ONBOARDING_STATE_KEY, {"currentStep": 2, "completedSteps": [1], "formData": {"firstName": "Grace"}})
    api.responses["/api/onboarding/progress"] = {
        "currentStep": 6,
        "completedSteps": [1, 2, 4, 5],
        "formData": {"taxId": "TX-1"},
    }
    wizard = OnboardingWizard(api, store)

    route = wizard.resume()

    assert route == "/onboarding/company-setup"
    assert wizard.current_step == OnboardingStep.DOCUMENTS
    assert wizard.form_data == {"firstName": "Grace", "taxId": "TX-1"}


def test_resume_finished_onboarding_goes_to_dashboard(api, store):
    api.responses["/api/onboarding/progress"] = ApiError("No onboarding progress found", status=404)
    store.set(ONBOARDING_STATE_KEY, {"currentStep": 8, "completedSteps": list(range(1, 9)), "formData": {}})

    assert OnboardingWizard(api, store).resume() == "/dashboard"
    assert api.current_path == "/dashboard"

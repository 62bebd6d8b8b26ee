"""Example: drive the API from Python the way the web client does.

Registers a company, resumes the onboarding wizard and uploads the CAC
certificate. Expects the server from ``app.py`` on localhost:5000.
"""

import logging
import sys

from workforce_portal.client import ApiClient, ApiError, DocumentUploader, LocalStore, OnboardingWizard


def main(cac_path: str) -> None:
    logging.basicConfig(level=logging.INFO)
    client = ApiClient("http://127.0.0.1:5000", current_path="/signup")
    store = LocalStore(".workforce-client.json")
    wizard = OnboardingWizard(client, store)

    if wizard.auth is None:
        wizard.register(
            email="founder@example.com",
            password="Change-me-123",
            first_name="Ada",
            last_name="Founder",
            company_name="Example Ltd",
        )
    print("Resume at:", wizard.resume())

    try:
        outcome = DocumentUploader(client, store).upload_document(wizard.auth["companyId"], "cac", cac_path)
    except ApiError as exc:
        print("Upload failed:", exc.message, exc.details)
        return
    print("CAC certificate:", outcome.url, "(reused)" if outcome.reused else "(uploaded)")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "cac.pdf")

"""Python client for the workforce portal API."""

from .dashboard import EmployeeLimit, TrialBanner, has_feature_access
from .documents import DocumentUploader, UploadOutcome, compute_file_hash, format_file_size, validate_file
from .errors import ApiError, InvalidDocument, SessionExpired, StepValidationError
from .http import ApiClient
from .onboarding import OnboardingWizard
from .storage import LocalStore

__all__ = [
    "ApiClient",
    "ApiError",
    "DocumentUploader",
    "EmployeeLimit",
    "InvalidDocument",
    "LocalStore",
    "OnboardingWizard",
    "SessionExpired",
    "StepValidationError",
    "TrialBanner",
    "UploadOutcome",
    "compute_file_hash",
    "format_file_size",
    "has_feature_access",
    "validate_file",
]

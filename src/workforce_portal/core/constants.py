"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import DocumentType, Role

ACCESS_TOKEN_MINUTES = 15
REFRESH_TOKEN_DAYS = 7
ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"

MIN_PASSWORD_LENGTH = 8
VERIFICATION_CODE_MINUTES = 30
INVITATION_DAYS = 7
TRIAL_DAYS = 30

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_HISTORY_LIMIT = 30

DEFAULT_GRACE_MINUTES = 15
DEFAULT_EARLY_DEPARTURE_MINUTES = 30
DEFAULT_GEOFENCE_RADIUS_METERS = 100
MIN_GEOFENCE_RADIUS_METERS = 10
MAX_GEOFENCE_RADIUS_METERS = 10_000
MAX_THRESHOLD_MINUTES = 240
EARTH_RADIUS_METERS = 6_371_000

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024
MAX_LOGO_BYTES = 5 * 1024 * 1024

DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/webp",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)
LOGO_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/svg+xml"})

REQUIRED_DOCUMENTS = (DocumentType.CAC, DocumentType.PROOF_OF_ADDRESS, DocumentType.COMPANY_POLICY)

# Per-employee prices in the smallest currency unit; overridable from settings.
DEFAULT_PLAN_PRICES = {
    "silver_monthly": 1200,
    "silver_yearly": 12000,
    "gold_monthly": 2500,
    "gold_yearly": 25000,
    "free": 0,
}

MANAGEMENT_ROLES = frozenset({Role.OWNER, Role.ADMIN})

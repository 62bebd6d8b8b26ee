"""Settings shared by every environment.

Environment modules star-import this file and override what differs.
"""

import os

from ..core.constants import DEFAULT_PLAN_PRICES, MAX_DOCUMENT_BYTES, TRIAL_DAYS


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def _csv(name: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
ACCESS_TOKEN_MINUTES = int(os.getenv("ACCESS_TOKEN_MINUTES", "15"))
REFRESH_TOKEN_DAYS = int(os.getenv("REFRESH_TOKEN_DAYS", "7"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_portal"),
}

UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
# Leave headroom above the document limit for multipart overhead.
MAX_CONTENT_LENGTH = MAX_DOCUMENT_BYTES + 1024 * 1024

PLAN_PRICES = {
    plan: int(os.getenv(f"{plan.upper()}_PLAN", str(price)))
    for plan, price in DEFAULT_PLAN_PRICES.items()
}
TRIAL_DAYS = int(os.getenv("TRIAL_DAYS", str(TRIAL_DAYS)))
DISABLED_FEATURES = _csv("DISABLED_FEATURES")

CORS_ORIGINS = _csv("CORS_ORIGINS") or ["http://localhost:5173"]
COOKIE_SECURE = _flag("COOKIE_SECURE")
COOKIE_DOMAIN = os.getenv("COOKIE_DOMAIN") or None

LOG_LEVEL = os.getenv("LOG_LEVEL")

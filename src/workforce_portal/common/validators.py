from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Optional, Sequence, Type, TypeVar
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError

E = TypeVar("E")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_SHA256_RE = re.compile(r"^[a-f0-9]{64}$", re.IGNORECASE)


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Any, field_name: str, min_len: int) -> str:
    if value is None or len(str(value).strip()) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return str(value).strip()


def require_email(value: Any, field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} is not a valid email address")
    return email


def optional_url(value: Any, field_name: str) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    url = str(value).strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError(f"{field_name} must be an http(s) URL")
    return url


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if min_value is not None and number < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}")
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} must be at most {max_value}")
    return number


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def require_choice(value: Any, enum_cls: Type[E], field_name: str, *, allowed: Optional[Iterable[E]] = None) -> E:
    try:
        choice = enum_cls(value)  # type: ignore[call-arg]
    except ValueError:
        raise ValidationError(f"{field_name} is not valid")
    if allowed is not None and choice not in set(allowed):
        raise ValidationError(f"{field_name} is not allowed")
    return choice


def require_time_hhmm(value: Any, field_name: str) -> time:
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must use HH:MM format")


def require_iso_date(value: Any, field_name: str) -> date:
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must use YYYY-MM-DD format")


def require_timezone(value: Any, field_name: str = "Timezone") -> str:
    name = require_non_empty(value, field_name)
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"{field_name} is not a known timezone")
    return name


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError("Latitude and longitude must be numbers")
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValidationError("Coordinates are out of range")
    return lat, lon


def require_sha256(value: Any) -> str:
    digest = require_non_empty(value, "hash")
    if not _SHA256_RE.match(digest):
        raise ValidationError("Invalid hash format. Expected SHA-256 (64 hex characters)")
    return digest.lower()


def require_fields(payload: Mapping[str, Any], fields: Sequence[str]) -> None:
    missing = [f for f in fields if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

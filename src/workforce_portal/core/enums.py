from __future__ import annotations

from enum import Enum, IntEnum


class Role(str, Enum):
    """Tenant-scoped user roles used for authorization."""

    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class SubscriptionPlan(str, Enum):
    """Plan identifiers as stored on the company record."""

    TRIAL = "trial"
    FREE = "free"
    SILVER_MONTHLY = "silver_monthly"
    SILVER_YEARLY = "silver_yearly"
    GOLD_MONTHLY = "gold_monthly"
    GOLD_YEARLY = "gold_yearly"


class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    PENDING_PAYMENT = "pending_payment"
    EXPIRED = "expired"


class PlanTier(str, Enum):
    """Feature tier a company falls into, derived from plan + status."""

    TRIAL = "trial"
    SILVER = "silver"
    GOLD = "gold"


class Feature(str, Enum):
    ATTENDANCE = "attendance"
    LEAVE = "leave"
    EMPLOYEES = "employees"
    DEPARTMENTS = "departments"
    PERFORMANCE = "performance"
    TASKS = "tasks"
    ANALYTICS = "analytics"
    REPORTS = "reports"
    WALLET = "wallet"
    AUDIT_LOGS = "audit_logs"


class DocumentType(str, Enum):
    CAC = "cac"
    PROOF_OF_ADDRESS = "proof_of_address"
    COMPANY_POLICY = "company_policy"
    LOGO = "logo"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    """Attendance status persisted on each clock-in record."""

    PRESENT = "present"
    LATE = "late"
    EARLY_DEPARTURE = "early_departure"


class OnboardingStep(IntEnum):
    """Wizard steps, in order. Step numbers are stored in saved progress."""

    REGISTRATION = 1
    COMPANY_SETUP = 2
    OWNER_DETAILS = 3
    BUSINESS_INFO = 4
    LOGO = 5
    DOCUMENTS = 6
    PLAN = 7
    COMPLETE = 8

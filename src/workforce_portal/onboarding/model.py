from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from ..common.datetime_utils import iso_or_none


def merge_steps(*groups: Iterable[int]) -> Tuple[int, ...]:
    """Union of step numbers as a sorted tuple without duplicates."""
    merged = set()
    for group in groups:
        merged.update(int(step) for step in group)
    return tuple(sorted(merged))


@dataclass(frozen=True)
class OnboardingProgress:
    """Saved state of one user's onboarding wizard."""

    user_id: int
    company_id: Optional[int]
    current_step: int
    completed_steps: Tuple[int, ...] = ()
    form_data: Dict[str, Any] = field(default_factory=dict)
    last_saved_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "companyId": self.company_id,
            "currentStep": self.current_step,
            "completedSteps": list(self.completed_steps),
            "formData": dict(self.form_data),
            "lastSavedAt": iso_or_none(self.last_saved_at),
        }

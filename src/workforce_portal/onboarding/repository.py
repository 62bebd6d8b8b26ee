from __future__ import annotations

from typing import Optional, Protocol

from .model import OnboardingProgress


class OnboardingProgressRepository(Protocol):
    def get(self, user_id: int) -> Optional[OnboardingProgress]:
        raise NotImplementedError

    def upsert(self, progress: OnboardingProgress) -> None:
        """Insert or replace the single progress row of ``progress.user_id``."""
        raise NotImplementedError

    def delete(self, user_id: int) -> bool:
        raise NotImplementedError

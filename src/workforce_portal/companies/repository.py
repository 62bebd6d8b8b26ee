from __future__ import annotations

from typing import Mapping, Optional, Protocol

from .model import Company


class CompanyRepository(Protocol):
    """Repository contract for company (tenant) records."""

    def get_by_id(self, company_id: int) -> Optional[Company]:
        raise NotImplementedError

    def create_company(self, *, name: str, email: Optional[str]) -> int:
        """Create a company on the trial plan with default settings."""
        raise NotImplementedError

    def update_fields(self, company_id: int, changes: Mapping[str, object]) -> bool:
        """Update whitelisted columns; keys are Company attribute names."""
        raise NotImplementedError

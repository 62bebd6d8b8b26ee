from __future__ import annotations

from datetime import datetime

from ...companies.model import Company
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """On-time clock-in, normal clock-out."""

    def decide_clock_in(self, *, local_now: datetime, company: Company) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_clock_out(self, *, local_now: datetime, company: Company, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)

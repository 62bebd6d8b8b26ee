from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...companies.model import Company
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in after work start plus the grace period."""

    def decide_clock_in(self, *, local_now: datetime, company: Company) -> StatusDecision:
        late = minutes_between(company.work_start_time, local_now.time())
        return StatusDecision(status=AttendanceStatus.LATE, minutes_late=max(0, late))

    def decide_clock_out(self, *, local_now: datetime, company: Company, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)

from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import minutes_between
from ...companies.model import Company
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class EarlyDepartureStrategy(AttendanceStrategy):
    """Clock-out before work end minus the early-departure threshold."""

    def decide_clock_in(self, *, local_now: datetime, company: Company) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_clock_out(self, *, local_now: datetime, company: Company, current: AttendanceStatus) -> StatusDecision:
        early = minutes_between(local_now.time(), company.work_end_time)
        return StatusDecision(status=AttendanceStatus.EARLY_DEPARTURE, minutes_early=max(0, early))

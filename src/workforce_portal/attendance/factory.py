from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..companies.model import Company
from .strategies.base import AttendanceStrategy
from .strategies.early_departure_strategy import EarlyDepartureStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on company rules."""

    def for_clock_in(self, *, local_now: datetime, company: Company) -> AttendanceStrategy:
        work_start = datetime.combine(local_now.date(), company.work_start_time, tzinfo=local_now.tzinfo)
        if local_now <= work_start + timedelta(minutes=company.grace_period_minutes):
            return PresentStrategy()
        return LateStrategy()

    def for_clock_out(self, *, local_now: datetime, company: Company) -> AttendanceStrategy:
        work_end = datetime.combine(local_now.date(), company.work_end_time, tzinfo=local_now.tzinfo)
        if local_now < work_end - timedelta(minutes=company.early_departure_threshold_minutes):
            return EarlyDepartureStrategy()
        return PresentStrategy()

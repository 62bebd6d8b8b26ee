from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...companies.model import Company
from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    minutes_late: int = 0
    minutes_early: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status.

    ``local_now`` is already converted to the company's timezone.
    """

    @abstractmethod
    def decide_clock_in(self, *, local_now: datetime, company: Company) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, local_now: datetime, company: Company, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError

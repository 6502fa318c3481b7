"""Revenue figures and the payload reported to the EO backend."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from eo_goal.metrics import format_fixed


@dataclass(frozen=True)
class RevenueFigure:
    """Revenue over an inclusive date range."""

    period_start: date
    period_end: date
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.period_start.isoformat(),
            "end": self.period_end.isoformat(),
            "amount": format_fixed(self.amount),
        }


@dataclass(frozen=True)
class MonthlyRevenue:
    """Revenue for one calendar month."""

    year: int
    month: int
    amount: Decimal

    @property
    def key(self) -> str:
        """The month as ``yyyy-MM``."""
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.key, "amount": str(self.amount)}


@dataclass(frozen=True)
class ReportPayload:
    """Body POSTed to a participant's EO endpoint."""

    version: str
    participant_name: str
    participant_chapter: str
    company_name: str
    twelve_months: tuple[MonthlyRevenue, ...]
    rolling_twelve: RevenueFigure

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the backend's camelCase field names."""
        return {
            "version": self.version,
            "participantName": self.participant_name,
            "participantChapter": self.participant_chapter,
            "companyName": self.company_name,
            "twelveMonths": [month.to_dict() for month in self.twelve_months],
            "rollingTwelve": self.rolling_twelve.to_dict(),
        }

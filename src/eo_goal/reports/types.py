"""Typed view of the row/cell tree Xero returns for reports.

Xero reports are nested tables: each row carries a ``RowType`` tag, an
optional ``Title``, a list of cells and (for sections) a list of child rows.
Cells are untyped strings whose meaning depends on their position.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any


class RowType(str, Enum):
    """Row type tags used in Xero report rows."""

    HEADER = "Header"
    SECTION = "Section"
    ROW = "Row"
    SUMMARY_ROW = "SummaryRow"

    @classmethod
    def parse(cls, value: Any) -> RowType | None:
        try:
            return cls(value)
        except ValueError:
            return None


def _get(raw: dict[str, Any], key: str) -> Any:
    """Read a key in either PascalCase (REST JSON) or camelCase (SDK objects)."""
    if key in raw:
        return raw[key]
    return raw.get(key[0].lower() + key[1:])


@dataclass(frozen=True)
class ReportCell:
    """A single report cell."""

    value: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> ReportCell:
        if not isinstance(raw, dict):
            return cls()
        value = _get(raw, "Value")
        return cls(value="" if value is None else str(value))


@dataclass(frozen=True)
class ReportRow:
    """A node in a report's row tree."""

    row_type: RowType | None = None
    title: str | None = None
    cells: tuple[ReportCell, ...] = ()
    rows: tuple[ReportRow, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> ReportRow:
        if not isinstance(raw, dict):
            return cls()
        cells = _get(raw, "Cells") or []
        rows = _get(raw, "Rows") or []
        title = _get(raw, "Title")
        return cls(
            row_type=RowType.parse(_get(raw, "RowType")),
            title=None if title is None else str(title),
            cells=tuple(ReportCell.from_dict(cell) for cell in cells),
            rows=tuple(cls.from_dict(row) for row in rows),
        )


@dataclass(frozen=True)
class Report:
    """The first report of a Xero report response."""

    titles: tuple[str, ...] = ()
    rows: tuple[ReportRow, ...] = ()

    @classmethod
    def from_response(cls, body: Any) -> Report:
        """Build from a decoded ``{"Reports": [...]}`` body.

        A body without reports yields an empty ``Report``; rejecting that is
        the extractor's job.
        """
        if not isinstance(body, dict):
            return cls()
        reports = _get(body, "Reports")
        if not isinstance(reports, list) or not reports or not isinstance(reports[0], dict):
            return cls()
        first = reports[0]
        titles = _get(first, "ReportTitles") or []
        rows = _get(first, "Rows") or []
        return cls(
            titles=tuple(str(title) for title in titles),
            rows=tuple(ReportRow.from_dict(row) for row in rows),
        )


@dataclass(frozen=True)
class LineItem:
    """One ``{title, amount}`` pair of a report section."""

    title: str
    amount: Decimal


@dataclass(frozen=True)
class ProfitAndLossSection:
    """A top-level P&L section: its line items and its summary amount."""

    title: str
    items: tuple[LineItem, ...]
    summary_title: str
    summary: Decimal


@dataclass
class ProfitAndLossReport:
    """Named top-level sections of a profit-and-loss report."""

    sections: dict[str, ProfitAndLossSection] = field(default_factory=dict)

    def summary(self, title: str) -> Decimal:
        return self.sections[title].summary

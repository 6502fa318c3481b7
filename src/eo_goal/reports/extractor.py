"""Strict extraction of amounts from a profit-and-loss row tree.

A reshaped report is treated as a broken upstream contract: every lookup
either finds exactly the shape it expects or raises a ``ReportError``. A
wrong revenue figure is worse than a failed run.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

import structlog

from eo_goal.models import MonthlyRevenue
from eo_goal.periods import MONTHS_IN_WINDOW, month_end_labels, trailing_months
from eo_goal.reports.types import (
    LineItem,
    ProfitAndLossReport,
    ProfitAndLossSection,
    Report,
    ReportCell,
    ReportRow,
    RowType,
)

logger = structlog.get_logger(__name__)

INCOME_SECTION = "Income"
TOTAL_INCOME_LABEL = "Total Income"
COMPANY_NAME_TITLE_INDEX = 1

# Label column plus one amount column per period
SINGLE_PERIOD_WIDTH = 2
MONTHLY_WIDTH = MONTHS_IN_WINDOW + 1


class ReportError(Exception):
    """The report does not have the shape the extractor relies on."""


class MissingReportError(ReportError):
    """The response carried no report rows (or no requested title)."""


class MissingSectionError(ReportError):
    """The target section is absent or has no rows."""


class MissingSummaryRowError(ReportError):
    """The section's summary row is absent, mislabeled or the wrong width."""


class HeaderMismatchError(ReportError):
    """The monthly header row does not list the expected months."""


class InvalidAmountError(ReportError):
    """A cell expected to hold an amount does not parse as a decimal."""


def _top_level_rows(report: Report) -> tuple[ReportRow, ...]:
    if not report.rows:
        raise MissingReportError("Empty response from Xero")
    return report.rows


def parse_amount(cell: ReportCell) -> Decimal:
    """Parse a cell value as an exact decimal."""
    try:
        amount = Decimal(cell.value.strip())
    except InvalidOperation as e:
        raise InvalidAmountError(f"Not an amount: {cell.value!r}") from e
    if not amount.is_finite():
        raise InvalidAmountError(f"Not an amount: {cell.value!r}")
    return amount


def find_section(report: Report, title: str) -> ReportRow:
    """Return the top-level row titled ``title``; it must have child rows."""
    rows = _top_level_rows(report)
    section = next((row for row in rows if row.title == title), None)
    if section is None or not section.rows:
        raise MissingSectionError(f"No {title!r} rows found in P&L report")
    return section


def find_summary_row(section: ReportRow, label: str, width: int) -> ReportRow:
    """Return the section's ``SummaryRow``, checking its label and width."""
    summary = next(
        (row for row in section.rows if row.row_type is RowType.SUMMARY_ROW), None
    )
    if summary is None:
        raise MissingSummaryRowError(f"{label!r} line not found in P&L report")
    if not summary.cells or summary.cells[0].value != label:
        found = summary.cells[0].value if summary.cells else None
        raise MissingSummaryRowError(f"Expected summary label {label!r}, found {found!r}")
    if len(summary.cells) != width:
        raise MissingSummaryRowError(
            f"{label!r} row has {len(summary.cells)} cells, expected {width}"
        )
    return summary


def extract_summary_amounts(
    report: Report,
    section_title: str = INCOME_SECTION,
    summary_label: str = TOTAL_INCOME_LABEL,
    width: int = SINGLE_PERIOD_WIDTH,
) -> list[Decimal]:
    """Amounts of a section's summary row, in column order (label excluded)."""
    section = find_section(report, section_title)
    summary = find_summary_row(section, summary_label, width)
    return [parse_amount(cell) for cell in summary.cells[1:]]


def extract_total(
    report: Report,
    section_title: str = INCOME_SECTION,
    summary_label: str = TOTAL_INCOME_LABEL,
) -> Decimal:
    """The single-period summary amount (e.g. total income)."""
    (amount,) = extract_summary_amounts(
        report, section_title, summary_label, SINGLE_PERIOD_WIDTH
    )
    return amount


def validate_monthly_header(report: Report, today: date) -> None:
    """Check the header row lists the twelve months before ``today``'s month."""
    header = _top_level_rows(report)[0]
    if header.row_type is not RowType.HEADER:
        raise HeaderMismatchError(
            f"First row is {header.row_type!r}, expected {RowType.HEADER.value!r}"
        )
    if len(header.cells) != MONTHLY_WIDTH:
        raise HeaderMismatchError(
            f"Header has {len(header.cells)} cells, expected {MONTHLY_WIDTH}"
        )

    expected = month_end_labels(today)
    for index, (cell, label) in enumerate(zip(header.cells[1:], expected), start=1):
        if cell.value != label:
            raise HeaderMismatchError(
                f"Header column {index} is {cell.value!r}, expected {label!r}"
            )


def extract_monthly(
    report: Report,
    today: date,
    section_title: str = INCOME_SECTION,
    summary_label: str = TOTAL_INCOME_LABEL,
) -> list[MonthlyRevenue]:
    """Per-month summary amounts for the twelve months before ``today``.

    Entries follow the header's column order, most recent month first.
    """
    amounts = extract_summary_amounts(report, section_title, summary_label, MONTHLY_WIDTH)
    validate_monthly_header(report, today)
    return [
        MonthlyRevenue(year=year, month=month, amount=amount)
        for (year, month), amount in zip(trailing_months(today), amounts)
    ]


def extract_report_title(report: Report, index: int = COMPANY_NAME_TITLE_INDEX) -> str:
    """A report title by position; index 1 holds the organisation name."""
    if index >= len(report.titles) or not report.titles[index].strip():
        raise MissingReportError(f"Report title {index} missing")
    return report.titles[index]


def extract_section(report: Report, title: str) -> ProfitAndLossSection:
    """Line items and summary of one section (single-period reports)."""
    section = find_section(report, title)
    summary = next(
        (row for row in section.rows if row.row_type is RowType.SUMMARY_ROW), None
    )
    if summary is None or len(summary.cells) != SINGLE_PERIOD_WIDTH:
        raise MissingSummaryRowError(f"No summary row in section {title!r}")

    items = tuple(
        LineItem(title=row.cells[0].value, amount=parse_amount(row.cells[1]))
        for row in section.rows
        if row.row_type is RowType.ROW and len(row.cells) == SINGLE_PERIOD_WIDTH
    )
    return ProfitAndLossSection(
        title=title,
        items=items,
        summary_title=summary.cells[0].value,
        summary=parse_amount(summary.cells[1]),
    )


def extract_profit_and_loss(report: Report) -> ProfitAndLossReport:
    """Every titled top-level section that carries a summary row."""
    result = ProfitAndLossReport()
    for row in _top_level_rows(report):
        if not row.title or not row.rows:
            continue
        try:
            result.sections[row.title] = extract_section(report, row.title)
        except ReportError as e:
            logger.debug("section_skipped", section=row.title, reason=str(e))
    return result

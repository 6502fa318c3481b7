"""Profit-and-loss report fetching and extraction."""

from eo_goal.reports.extractor import (
    HeaderMismatchError,
    InvalidAmountError,
    MissingReportError,
    MissingSectionError,
    MissingSummaryRowError,
    ReportError,
    extract_monthly,
    extract_profit_and_loss,
    extract_report_title,
    extract_section,
    extract_summary_amounts,
    extract_total,
)
from eo_goal.reports.fetcher import ReportFetcher
from eo_goal.reports.types import (
    ProfitAndLossReport,
    ProfitAndLossSection,
    Report,
    ReportCell,
    ReportRow,
    RowType,
)

__all__ = [
    "ReportFetcher",
    "Report",
    "ReportRow",
    "ReportCell",
    "RowType",
    "ProfitAndLossReport",
    "ProfitAndLossSection",
    "ReportError",
    "MissingReportError",
    "MissingSectionError",
    "MissingSummaryRowError",
    "HeaderMismatchError",
    "InvalidAmountError",
    "extract_total",
    "extract_monthly",
    "extract_summary_amounts",
    "extract_report_title",
    "extract_section",
    "extract_profit_and_loss",
]

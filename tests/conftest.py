"""Pytest configuration and fixtures."""

import copy
import os
from datetime import date
from typing import Any

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("XERO_CLIENT_ID", "test-client-id")
os.environ.setdefault("XERO_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("PUSHOVER_TOKEN", "test-pushover-token")
os.environ.setdefault("PUSHOVER_USER", "test-pushover-user")
os.environ.setdefault("EO_PARTICIPANT_NAME", "Jane Founder")
os.environ.setdefault("EO_PARTICIPANT_CHAPTER", "sydney")
os.environ.setdefault("EO_ENDPOINT_DIRECTORY_URL", "https://directory.example.com/endpoints.json")

TODAY = date(2026, 10, 19)

# Twelve months before TODAY, most recent first
MONTH_END_LABELS = [
    "30 Sep 26",
    "31 Aug 26",
    "31 Jul 26",
    "30 Jun 26",
    "31 May 26",
    "30 Apr 26",
    "31 Mar 26",
    "28 Feb 26",
    "31 Jan 26",
    "31 Dec 25",
    "30 Nov 25",
    "31 Oct 25",
]
MONTHLY_AMOUNTS = [f"{120000 + index * 1000}.00" for index in range(12)]


def _cells(*values: str) -> list[dict[str, Any]]:
    return [{"Value": value} for value in values]


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def single_period_body() -> dict[str, Any]:
    """A one-column P&L response totalling 1,534,230.50 of income."""
    return {
        "Reports": [
            {
                "ReportID": "ProfitAndLoss",
                "ReportName": "Profit and Loss",
                "ReportTitles": [
                    "Profit & Loss",
                    "Demo Company (AU)",
                    "19 October 2025 to 18 October 2026",
                ],
                "Rows": [
                    {"RowType": "Header", "Cells": _cells("", "18 Oct 26")},
                    {
                        "RowType": "Section",
                        "Title": "Income",
                        "Rows": [
                            {"RowType": "Row", "Cells": _cells("Sales", "1500000.00")},
                            {"RowType": "Row", "Cells": _cells("Interest Income", "34230.50")},
                            {"RowType": "SummaryRow", "Cells": _cells("Total Income", "1534230.50")},
                        ],
                    },
                    {
                        "RowType": "Section",
                        "Title": "Less Operating Expenses",
                        "Rows": [
                            {"RowType": "Row", "Cells": _cells("Rent", "120000.00")},
                            {
                                "RowType": "SummaryRow",
                                "Cells": _cells("Total Operating Expenses", "120000.00"),
                            },
                        ],
                    },
                    {
                        "RowType": "Section",
                        "Title": "",
                        "Rows": [{"RowType": "Row", "Cells": _cells("Net Profit", "1414230.50")}],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def monthly_body() -> dict[str, Any]:
    """A twelve-column P&L response for the months before TODAY."""
    return {
        "Reports": [
            {
                "ReportID": "ProfitAndLoss",
                "ReportName": "Profit and Loss",
                "ReportTitles": [
                    "Profit & Loss",
                    "Demo Company (AU)",
                    "For the month ended 30 September 2026",
                ],
                "Rows": [
                    {"RowType": "Header", "Cells": _cells("", *MONTH_END_LABELS)},
                    {
                        "RowType": "Section",
                        "Title": "Income",
                        "Rows": [
                            {"RowType": "Row", "Cells": _cells("Sales", *MONTHLY_AMOUNTS)},
                            {
                                "RowType": "SummaryRow",
                                "Cells": _cells("Total Income", *MONTHLY_AMOUNTS),
                            },
                        ],
                    },
                ],
            }
        ]
    }


@pytest.fixture
def copy_body():
    """Deep-copy a response body so a test can reshape it."""
    return copy.deepcopy

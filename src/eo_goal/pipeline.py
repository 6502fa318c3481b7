"""One run of the goal tracker: fetch, extract, compute, notify, report."""

import argparse
import asyncio
import contextlib
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, cast

import structlog
from pydantic import ValidationError

from eo_goal.clients import EOBackendClient, PushoverClient, XeroClient
from eo_goal.config import FlatSettings, bind_run_context, configure_logging, get_settings
from eo_goal.models import MonthlyRevenue, ReportPayload, RevenueFigure
from eo_goal.notifier import Notification, Notifier, build_notification
from eo_goal.periods import MONTHS_IN_WINDOW, previous_month_range, rolling_twelve_range
from eo_goal.reporter import Reporter, build_report_payload
from eo_goal.reports import (
    ReportFetcher,
    extract_monthly,
    extract_profit_and_loss,
    extract_report_title,
    extract_total,
)
from eo_goal.reports.fetcher import ProfitAndLossAPI

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


@dataclass
class RunResult:
    """What a run computed and which deliveries went through."""

    rolling_twelve: RevenueFigure
    notification: Notification
    payload: ReportPayload | None = None
    notified: bool = False
    reported: bool = False


async def fetch_rolling_twelve(fetcher: ReportFetcher, today: date) -> RevenueFigure:
    """Total income for the twelve months ending yesterday."""
    start, end = rolling_twelve_range(today)
    report = await fetcher.fetch_profit_and_loss(start, end)

    total = extract_total(report)
    profit_and_loss = extract_profit_and_loss(report)
    logger.debug(
        "profit_and_loss_sections",
        sections={title: str(profit_and_loss.summary(title)) for title in profit_and_loss.sections},
    )
    return RevenueFigure(period_start=start, period_end=end, amount=total)


async def fetch_monthly_breakdown(
    fetcher: ReportFetcher, today: date
) -> tuple[str, list[MonthlyRevenue]]:
    """Company name and per-month income for the last twelve complete months."""
    start, end = previous_month_range(today)
    report = await fetcher.fetch_profit_and_loss(
        start, end, periods=MONTHS_IN_WINDOW - 1, timeframe="MONTH"
    )
    return extract_report_title(report), extract_monthly(report, today)


async def run(
    settings: FlatSettings,
    today: date | None = None,
    goal: Decimal | None = None,
    dry_run: bool = False,
    send_push: bool = True,
    send_report: bool = True,
    xero: ProfitAndLossAPI | None = None,
    pushover: PushoverClient | None = None,
    backend: EOBackendClient | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> RunResult:
    """Run the pipeline once.

    Failures fetching or validating the report propagate. A failed push
    notification does not stop the EO report; it is re-raised once the report
    has been attempted.
    """
    today = today or date.today()
    goal = goal if goal is not None else settings.revenue_goal
    send_push = send_push and settings.push_enabled
    send_report = send_report and settings.report_enabled

    async with contextlib.AsyncExitStack() as stack:
        if xero is None:
            xero = await stack.enter_async_context(XeroClient())
        fetcher = ReportFetcher(xero, backoff=settings.xero_rate_limit_backoff, sleep=sleep)

        figure = await fetch_rolling_twelve(fetcher, today)
        notification = build_notification(figure.amount, goal)
        result = RunResult(rolling_twelve=figure, notification=notification)
        logger.info(
            "rolling_twelve_computed",
            start=figure.period_start.isoformat(),
            end=figure.period_end.isoformat(),
            amount=str(figure.amount),
            message=notification.message,
        )

        notify_error: Exception | None = None
        if send_push and dry_run:
            logger.info("notification_skipped", reason="dry_run", title=notification.title)
        elif send_push:
            if pushover is None:
                pushover = await stack.enter_async_context(PushoverClient())
            try:
                await Notifier(pushover).send(notification)
                result.notified = True
            except Exception as e:
                logger.error("notification_failed", error=str(e))
                notify_error = e

        if send_report:
            company_name, months = await fetch_monthly_breakdown(fetcher, today)
            result.payload = build_report_payload(
                participant_name=cast(str, settings.eo_participant_name),
                participant_chapter=cast(str, settings.eo_participant_chapter),
                company_name=company_name,
                twelve_months=months,
                rolling_twelve=figure,
            )
            if dry_run:
                logger.info("report_skipped", reason="dry_run", payload=result.payload.to_dict())
            else:
                if backend is None:
                    backend = await stack.enter_async_context(EOBackendClient())
                reporter = Reporter(backend, cast(str, settings.eo_endpoint_directory_url))
                result.reported = await reporter.report(result.payload)

        if notify_error is not None:
            raise notify_error

    return result


def _positive_decimal(value: str) -> Decimal:
    try:
        parsed = Decimal(value.replace(",", ""))
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not parsed.is_finite() or parsed <= 0:
        raise argparse.ArgumentTypeError(f"goal must be positive: {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eo-goal",
        description="Report rolling twelve-month revenue against the EO goal",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and compute, but send nothing",
    )
    parser.add_argument(
        "--goal",
        type=_positive_decimal,
        default=None,
        help="Revenue goal (default: REVENUE_GOAL)",
    )
    parser.add_argument("--skip-push", action="store_true", help="Do not send the push notification")
    parser.add_argument("--skip-report", action="store_true", help="Do not post the EO report")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Entry point; returns the process exit status.

    Usage:
        uv run python -m eo_goal.pipeline
        uv run python -m eo_goal.pipeline --dry-run --goal=2000000
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging(level="INFO", format="console")
        logger.error(
            "invalid_configuration",
            errors=[
                f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
                for error in e.errors()
            ],
        )
        return EXIT_CONFIG_ERROR

    configure_logging(level=settings.log_level, format=settings.log_format)
    bind_run_context(
        chapter=settings.eo_participant_chapter,
        dry_run=args.dry_run,
    )

    try:
        await run(
            settings,
            goal=args.goal,
            dry_run=args.dry_run,
            send_push=not args.skip_push,
            send_report=not args.skip_report,
        )
    except Exception as e:
        logger.exception("run_failed", error=str(e))
        return EXIT_FAILURE

    logger.info("run_completed")
    return EXIT_OK


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()

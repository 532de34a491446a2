"""
dashboard/console/presentation.py

Display vocabulary for the data-quality console: labels, icons, badges and
tabular views. Every lookup falls back to a generic marker for values the
dashboard does not recognise.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import pandas as pd

from dashboard.domain.error_lifecycle import ErrorKind, ErrorStatus, parse_kind, parse_status
from dashboard.schemas.completeness import (
    CompletenessPercentages,
    IncompleteListing,
    ListingCompleteness,
    MissingDataCounts,
)
from dashboard.schemas.errors import ErrorSummary, TrackedError

if TYPE_CHECKING:
    from dashboard.console.error_console import CommandOutcome

PLACEHOLDER = "—"
FALLBACK_ICON = "❌"
FALLBACK_STATUS_MARKER = "⚫"


class ConsoleTab(str, Enum):
    PENDING = "pending"
    ISSUES = "issues"
    INCOMPLETE = "incomplete"


TAB_TITLES: dict[ConsoleTab, str] = {
    ConsoleTab.PENDING: "Pending Errors",
    ConsoleTab.ISSUES: "Listings with Issues",
    ConsoleTab.INCOMPLETE: "Missing Calendars",
}

ERROR_TYPE_LABELS: dict[ErrorKind, str] = {
    ErrorKind.CALENDAR_FETCH: "Calendar Fetch",
    ErrorKind.COMPETITOR_FETCH: "Competitor Fetch",
    ErrorKind.PRICE_FETCH: "Price Fetch",
    ErrorKind.LISTING_DATA: "Listing Data",
    ErrorKind.MARKET_DATA: "Market Data",
    ErrorKind.AI_SUGGESTION: "AI Suggestion",
    ErrorKind.VALIDATION: "Validation",
}

ERROR_TYPE_ICONS: dict[ErrorKind, str] = {
    ErrorKind.CALENDAR_FETCH: "📅",
    ErrorKind.COMPETITOR_FETCH: "🏠",
    ErrorKind.PRICE_FETCH: "💰",
    ErrorKind.LISTING_DATA: "📋",
    ErrorKind.MARKET_DATA: "📊",
    ErrorKind.AI_SUGGESTION: "🤖",
    ErrorKind.VALIDATION: "⚠️",
}

STATUS_MARKERS: dict[ErrorStatus, str] = {
    ErrorStatus.PENDING: "🟡",
    ErrorStatus.RETRYING: "🔵",
    ErrorStatus.FAILED: "🔴",
    ErrorStatus.RESOLVED: "🟢",
    ErrorStatus.IGNORED: "⚪",
}


def tab_label(tab: ConsoleTab, count: int) -> str:
    return f"{TAB_TITLES[tab]} ({count})"


def kind_label(error_type: str | None) -> str:
    kind = parse_kind(error_type)
    if kind is None:
        return (error_type or "").strip() or "Unknown"
    return ERROR_TYPE_LABELS[kind]


def kind_icon(error_type: str | None) -> str:
    kind = parse_kind(error_type)
    if kind is None:
        return FALLBACK_ICON
    return ERROR_TYPE_ICONS[kind]


def status_badge(status: ErrorStatus | str | None) -> str:
    """
    Return "<marker> <STATUS>" for known statuses and a generic marker
    followed by the raw text otherwise.
    """

    known = status if isinstance(status, ErrorStatus) else parse_status(status)
    if known is None:
        raw = (status or "").strip() if isinstance(status, str) else ""
        return f"{FALLBACK_STATUS_MARKER} {raw or 'UNKNOWN'}"
    return f"{STATUS_MARKERS[known]} {known.value}"


@dataclass(frozen=True)
class SummaryCard:
    label: str
    value: int


def summary_cards(summary: ErrorSummary | None) -> list[SummaryCard]:
    if summary is None:
        summary = ErrorSummary()
    return [
        SummaryCard("Pending", summary.pending),
        SummaryCard("Retrying", summary.retrying),
        SummaryCard("Failed", summary.failed),
        SummaryCard("Resolved", summary.resolved),
    ]


def kind_breakdown(summary: ErrorSummary | None) -> list[tuple[str, str, int]]:
    """
    (icon, label, count) per error kind reported in the summary.
    """

    if summary is None:
        return []
    return [(kind_icon(kind), kind_label(kind), count) for kind, count in summary.by_type.items()]


def completeness_bars(completeness: CompletenessPercentages) -> list[tuple[str, float]]:
    return [
        ("Calendar", completeness.calendar),
        ("Market", completeness.market),
        ("AI", completeness.ai),
    ]


def missing_data_badges(missing: MissingDataCounts) -> list[str]:
    badges: list[str] = []
    if missing.prices > 0:
        badges.append(f"💰 {missing.prices} missing prices")
    if missing.market > 0:
        badges.append(f"📊 {missing.market} missing market data")
    if missing.ai > 0:
        badges.append(f"🤖 {missing.ai} missing AI suggestions")
    return badges


def format_percentage(value: float) -> str:
    return f"{value:.0f}%" if float(value).is_integer() else f"{value:.1f}%"


def format_date(value: datetime | None) -> str:
    if value is None:
        return PLACEHOLDER
    return value.strftime("%b %d, %Y")


def format_datetime(value: datetime | None) -> str:
    if value is None:
        return PLACEHOLDER
    return value.strftime("%b %d, %Y %H:%M")


def format_currency(value: float | int | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"${value:,.0f}" if float(value).is_integer() else f"${value:,.2f}"


def retries_label(error: TrackedError) -> str:
    if error.max_retries is None:
        return str(error.retry_count)
    return f"{error.retry_count} / {error.max_retries}"


def pending_errors_frame(errors: Sequence[TrackedError]) -> pd.DataFrame:
    """
    Tabular view of tracked errors for `st.dataframe`.
    """

    rows = [
        {
            "": kind_icon(error.error_type),
            "Listing": error.listing_title or error.listing_id,
            "Type": kind_label(error.error_type),
            "Status": status_badge(error.display_status or error.status),
            "Message": error.message,
            "Date": format_date(error.date),
            "Retries": retries_label(error),
            "Next Retry": format_datetime(error.next_retry_at),
        }
        for error in errors
    ]
    columns = ["", "Listing", "Type", "Status", "Message", "Date", "Retries", "Next Retry"]
    return pd.DataFrame(rows, columns=columns)


def issues_frame(listings: Sequence[ListingCompleteness]) -> pd.DataFrame:
    rows = [
        {
            "Listing": item.listing.title if item.listing else PLACEHOLDER,
            "Calendar %": item.completeness.calendar,
            "Market %": item.completeness.market,
            "AI %": item.completeness.ai,
            "Missing prices": item.missing_data.prices,
            "Missing market": item.missing_data.market,
            "Missing AI": item.missing_data.ai,
            "Last validated": format_datetime(item.last_validated),
        }
        for item in listings
    ]
    columns = [
        "Listing",
        "Calendar %",
        "Market %",
        "AI %",
        "Missing prices",
        "Missing market",
        "Missing AI",
        "Last validated",
    ]
    return pd.DataFrame(rows, columns=columns)


def incomplete_frame(listings: Sequence[IncompleteListing]) -> pd.DataFrame:
    rows = [
        {
            "Listing": listing.title or listing.id,
            "Analyzed chunks": listing.analysis_count,
            "Link": listing.airbnb_url or "",
        }
        for listing in listings
    ]
    return pd.DataFrame(rows, columns=["Listing", "Analyzed chunks", "Link"])


COMMAND_DONE_MESSAGES = {
    "resolve": "Error resolved.",
    "ignore": "Error ignored.",
    "retry": "Retry requested.",
    "retry_all": "Retry requested for all errors on this listing.",
    "validate": "Listing data validated.",
}


def command_flash(outcome: CommandOutcome) -> tuple[str, str]:
    """
    Streamlit message level and text reporting one command outcome.
    """

    if outcome.succeeded:
        return "success", COMMAND_DONE_MESSAGES.get(outcome.command, "Done.")
    if outcome.status == "skipped":
        return "info", outcome.message or "Nothing to do."
    label = outcome.command.replace("_", " ").capitalize()
    return "error", f"{label} failed: {outcome.message}" if outcome.message else f"{label} failed"

"""
dashboard/listing_views.py

Tabular and chart views over the per-listing audit payload: competitor
chunks, daily market snapshots, AI price suggestions and calendar days.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from dashboard.console.presentation import PLACEHOLDER, format_currency

SNAPSHOT_COLUMNS = [
    "Target Date",
    "Days Out",
    "Your Price",
    "Status",
    "Market Min",
    "Market Avg",
    "Market Max",
    "AI Prediction",
]
SUGGESTION_COLUMNS = ["Date", "Days Out", "Recommended", "Low", "High", "Market Min", "Market Avg", "Market Max"]
CALENDAR_COLUMNS = ["Day", "Date", "Price", "Market Range", "Market Avg", "Availability"]
CHUNK_COLUMNS = ["Check-in", "Check-out", "Nights", "Competitors", "Low", "Avg", "High"]


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _money(value: Any) -> str:
    return format_currency(_number(value))


def _timestamp(value: Any) -> pd.Timestamp | None:
    if not value:
        return None
    parsed = pd.to_datetime(value, errors="coerce", utc=True)
    return None if pd.isna(parsed) else parsed


def _short_date(value: Any) -> str:
    parsed = _timestamp(value)
    return PLACEHOLDER if parsed is None else parsed.strftime("%b %d")


def _full_date(value: Any) -> str:
    parsed = _timestamp(value)
    return PLACEHOLDER if parsed is None else parsed.strftime("%a, %b %d, %Y")


def _weekday(value: Any) -> str:
    parsed = _timestamp(value)
    return "" if parsed is None else parsed.strftime("%a")


def audit_sections(payload: Any) -> tuple[dict, dict, dict]:
    """
    Split a listing audit response into its listing, data and counts parts.
    """

    if not isinstance(payload, Mapping):
        return {}, {}, {}
    return (
        dict(payload.get("listing") or {}),
        dict(payload.get("data") or {}),
        dict(payload.get("counts") or {}),
    )


def listing_specs(listing: Mapping[str, Any]) -> str:
    bedrooms = listing.get("bedrooms")
    guests = listing.get("guests")
    parts = []
    if bedrooms is not None:
        parts.append(f"🛏️ {bedrooms} bed")
    if guests is not None:
        parts.append(f"👥 {guests} guests")
    return " · ".join(parts)


def has_collected_data(counts: Mapping[str, Any]) -> bool:
    return (_number(counts.get("calendarDays")) or 0) > 0 or (_number(counts.get("analyses")) or 0) > 0


def chunks_frame(analyses: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "Check-in": _full_date(chunk.get("checkIn")),
            "Check-out": _full_date(chunk.get("checkOut")),
            "Nights": chunk.get("nights"),
            "Competitors": chunk.get("competitorCount"),
            "Low": _money(chunk.get("lowestPrice")),
            "Avg": _money(chunk.get("averagePrice")),
            "High": _money(chunk.get("highestPrice")),
        }
        for chunk in analyses
    ]
    return pd.DataFrame(rows, columns=CHUNK_COLUMNS)


def competitors_frame(chunk: Mapping[str, Any]) -> pd.DataFrame:
    rows = [
        {
            "Competitor": competitor.get("title") or PLACEHOLDER,
            "Bedrooms": competitor.get("bedrooms"),
            "Price": _money(competitor.get("price")),
        }
        for competitor in chunk.get("competitors") or []
    ]
    return pd.DataFrame(rows, columns=["Competitor", "Bedrooms", "Price"])


def snapshots_frame(snapshots: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "Target Date": _short_date(snap.get("targetDate")),
            "Days Out": snap.get("daysUntilCheckin"),
            "Your Price": _money(snap.get("ourPrice")),
            "Status": "Booked" if snap.get("isBooked") else "Open",
            "Market Min": _money(snap.get("competitorMin")),
            "Market Avg": _money(snap.get("competitorAvg")),
            "Market Max": _money(snap.get("competitorMax")),
            "AI Prediction": _money(snap.get("predictedPrice")),
        }
        for snap in snapshots
    ]
    return pd.DataFrame(rows, columns=SNAPSHOT_COLUMNS)


def snapshot_chart_frame(snapshots: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """
    Our price against the competitor min/avg/max band, indexed by target date.
    """

    rows = [
        {
            "Date": _short_date(snap.get("targetDate")),
            "Your Price": _number(snap.get("ourPrice")),
            "Market Min": _number(snap.get("competitorMin")),
            "Market Avg": _number(snap.get("competitorAvg")),
            "Market Max": _number(snap.get("competitorMax")),
        }
        for snap in snapshots
    ]
    frame = pd.DataFrame(rows, columns=["Date", "Your Price", "Market Min", "Market Avg", "Market Max"])
    return frame.set_index("Date")


def suggestions_frame(suggestions: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "Date": f"{_weekday(sug.get('date'))} {_short_date(sug.get('date'))}".strip(),
            "Days Out": sug.get("daysUntilCheckin"),
            "Recommended": _money(sug.get("recommendedPrice")),
            "Low": _money(sug.get("lowPrice")),
            "High": _money(sug.get("highPrice")),
            "Market Min": _money(sug.get("competitorMin")),
            "Market Avg": _money(sug.get("competitorAvg")),
            "Market Max": _money(sug.get("competitorMax")),
        }
        for sug in suggestions
    ]
    return pd.DataFrame(rows, columns=SUGGESTION_COLUMNS)


def suggestion_chart_frame(suggestions: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "Date": _short_date(sug.get("date")),
            "Recommended": _number(sug.get("recommendedPrice")),
            "Low Range": _number(sug.get("lowPrice")),
            "High Range": _number(sug.get("highPrice")),
            "Market Avg": _number(sug.get("competitorAvg")),
        }
        for sug in suggestions
    ]
    frame = pd.DataFrame(rows, columns=["Date", "Recommended", "Low Range", "High Range", "Market Avg"])
    return frame.set_index("Date")


def calendar_days(payload: Any) -> list[dict]:
    """
    Extract calendar days from a calendar endpoint response.

    Accepts a bare list or an object wrapping it under `calendarDays`,
    `calendar` or `days`.
    """

    if isinstance(payload, list):
        days = payload
    elif isinstance(payload, Mapping):
        days = payload.get("calendarDays") or payload.get("calendar") or payload.get("days") or []
    else:
        days = []
    return [dict(day) for day in days if isinstance(day, Mapping)]


def calendar_frame(days: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    rows = []
    for day in days:
        low = _number(day.get("marketMinPrice"))
        high = _number(day.get("marketMaxPrice"))
        market_range = f"{format_currency(low)} - {format_currency(high)}" if low else PLACEHOLDER
        rows.append(
            {
                "Day": _weekday(day.get("date")),
                "Date": _short_date(day.get("date")),
                "Price": _money(day.get("price")),
                "Market Range": market_range,
                "Market Avg": _money(day.get("marketAvgPrice")) if day.get("marketAvgPrice") else PLACEHOLDER,
                "Availability": "Open" if day.get("isAvailable") else "Booked",
            }
        )
    return pd.DataFrame(rows, columns=CALENDAR_COLUMNS)

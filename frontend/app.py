"""Streamlit frontend for the pricing data-quality dashboard.

Replaceable UI layer — all display logic lives here.
Backend access goes through PricingAPIClient; console behaviour through ErrorConsole.
"""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd
import streamlit as st

from dashboard.client import ApiClientError, PricingAPIClient, build_pricing_client
from dashboard.config import get_backend_settings
from dashboard.console import ConsoleTab, ErrorConsole
from dashboard.console.presentation import (
    command_flash,
    completeness_bars,
    format_currency,
    format_date,
    format_datetime,
    format_percentage,
    incomplete_frame,
    kind_breakdown,
    kind_icon,
    kind_label,
    missing_data_badges,
    pending_errors_frame,
    retries_label,
    status_badge,
    summary_cards,
)
from dashboard.domain import ErrorCommand
from dashboard.listing_views import (
    audit_sections,
    calendar_days,
    calendar_frame,
    chunks_frame,
    competitors_frame,
    has_collected_data,
    listing_specs,
    snapshot_chart_frame,
    snapshots_frame,
    suggestion_chart_frame,
    suggestions_frame,
)
from dashboard.logging_utils import configure_logging

# ── Page config (must be first Streamlit call) ─────────────────────────────
st.set_page_config(
    page_title="Market Data",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource(show_spinner=False)
def _load_client() -> PricingAPIClient:
    configure_logging()
    return build_pricing_client()


# ── Session state defaults ─────────────────────────────────────────────────
_STATE_DEFAULTS: dict = {
    "page": "Overview",
    "selected_listing_id": None,
    "include_resolved": False,
    "market_date": None,
    "flash": None,
}

for _key, _val in _STATE_DEFAULTS.items():
    if _key not in st.session_state:
        st.session_state[_key] = _val

if "console" not in st.session_state:
    st.session_state.console = ErrorConsole(_load_client())
    st.session_state.console.load()

client: PricingAPIClient = _load_client()
console: ErrorConsole = st.session_state.console

_PAGES = ["Overview", "Market Analysis", "Listing Detail", "Data Quality"]


def _open_listing(listing_id: str) -> None:
    st.session_state.selected_listing_id = listing_id
    st.session_state.page = "Listing Detail"


def _show_flash() -> None:
    flash: Optional[tuple[str, str]] = st.session_state.flash
    if not flash:
        return
    level, text = flash
    getattr(st, level, st.info)(text)
    st.session_state.flash = None


def _fetch(label: str, call) -> Any:
    """Run one backend read; render the failure and return None on error."""
    try:
        return call()
    except ApiClientError as exc:
        st.error(f"Failed to load {label}: {exc}")
        return None


# ── Sidebar ────────────────────────────────────────────────────────────────
with st.sidebar:
    st.title("📊 Market Data")
    st.caption("Pricing pipeline review")
    st.divider()
    st.radio("Page", _PAGES, key="page")
    if not get_backend_settings().has_credentials and client.auth.token is None:
        st.warning(
            "No backend credentials configured. Set DASHBOARD_AUTH_EMAIL and "
            "DASHBOARD_AUTH_PASSWORD or provide a saved token."
        )


# ── Overview ───────────────────────────────────────────────────────────────
def _render_overview() -> None:
    header, action = st.columns([4, 1])
    payload = _fetch("audit", client.get_audit)
    audit: dict = (payload or {}).get("audit") or {}
    listings: list = audit.get("listings") or []

    header.header("Your Listings")
    header.caption(f"{len(listings)} properties tracked")

    if action.button("🔄 Sync Market Data", use_container_width=True):
        with st.spinner("Starting data collection…"):
            try:
                client.trigger_nightly_collection()
                st.success(
                    "Data collection started! This may take 10-15 minutes. "
                    "Refresh the page to see updates."
                )
            except ApiClientError as exc:
                st.error(f"Failed: {exc}")

    counts: dict = audit.get("globalCounts") or {}
    has_data = (counts.get("totalPricingAnalyses") or 0) > 0 or (counts.get("totalCalendarDays") or 0) > 0
    if not has_data:
        st.info(
            "No market data yet. Click **Sync Market Data** to fetch competitor pricing "
            "and calendar data. This runs automatically every night."
        )
    else:
        cols = st.columns(4)
        cols[0].metric("Calendar Days", counts.get("totalCalendarDays") or 0)
        cols[1].metric("Competitors", counts.get("totalCompetitors") or 0)
        cols[2].metric("Snapshots", counts.get("totalDailyMarketSnapshots") or 0)
        cols[3].metric("AI Suggestions", counts.get("totalAISuggestions") or 0)

    if not listings:
        st.warning("No listings found. Add a listing URL in the mobile app to start tracking.")
        return

    for listing in listings:
        data_counts: dict = listing.get("dataCounts") or {}
        with st.container(border=True):
            cols = st.columns([3, 1, 1, 1, 1])
            cols[0].markdown(f"**{listing.get('title', '—')}**  \n{listing.get('location') or 'No location'}")
            cols[1].metric("Beds", listing.get("bedrooms") or 0)
            cols[2].metric("Days", data_counts.get("calendarDays") or 0)
            cols[3].metric("AI Tips", data_counts.get("aiSuggestions") or 0)
            ready = (data_counts.get("calendarDays") or 0) > 0
            cols[4].markdown("🟢 Data Ready" if ready else "🟡 Needs Sync")
            cols[4].button(
                "View →",
                key=f"overview-view-{listing.get('id')}",
                on_click=_open_listing,
                args=(str(listing.get("id")),),
            )


# ── Market analysis ────────────────────────────────────────────────────────
def _render_market_analysis() -> None:
    st.header("Market Analysis")
    data = _fetch("market analysis", lambda: client.get_market_analysis(st.session_state.market_date))
    if not data:
        return

    dates: list = data.get("availableDates") or []
    if dates:
        selected = data.get("selectedDate") or dates[0]
        index = dates.index(selected) if selected in dates else 0
        choice = st.selectbox("Analysis date", dates, index=index)
        if choice != selected:
            st.session_state.market_date = choice
            st.rerun()

    listings: list = data.get("listings") or []
    if not listings:
        st.info("No market analysis available for this date.")
        return

    for listing in listings:
        with st.expander(f"{listing.get('title', '—')} — {listing.get('location') or 'No location'}"):
            cols = st.columns(4)
            cols[0].metric("Average", format_currency(listing.get("overallAverage")))
            cols[1].metric("Lowest", format_currency(listing.get("overallLowest")))
            cols[2].metric("Highest", format_currency(listing.get("overallHighest")))
            cols[3].metric("Competitors", listing.get("totalCompetitors") or 0)

            chunks: list = listing.get("chunks") or []
            if chunks:
                frame = pd.DataFrame(
                    [
                        {
                            "Check-in": chunk.get("checkIn"),
                            "Check-out": chunk.get("checkOut"),
                            "Nights": chunk.get("nights"),
                            "Competitors": chunk.get("competitorCount"),
                            "Average": chunk.get("averagePrice"),
                            "Lowest": chunk.get("lowestPrice"),
                            "Highest": chunk.get("highestPrice"),
                            "Your price": chunk.get("userPrice"),
                        }
                        for chunk in chunks
                    ]
                )
                st.dataframe(frame, use_container_width=True, hide_index=True)
            st.button(
                "Open listing",
                key=f"market-view-{listing.get('id')}",
                on_click=_open_listing,
                args=(str(listing.get("id")),),
            )


# ── Listing detail ─────────────────────────────────────────────────────────
def _render_listing_header(listing: dict, listing_id: str) -> None:
    info, link = st.columns([4, 1])
    info.header(listing.get("title") or listing_id)
    info.caption(listing.get("location") or "No location")
    specs = listing_specs(listing)
    if specs:
        info.markdown(specs)
    if listing.get("airbnbUrl"):
        link.link_button("View on Airbnb ↗", listing["airbnbUrl"], use_container_width=True)


def _render_chunks_tab(analyses: list) -> None:
    st.caption("Each chunk represents a date range with scraped competitor data")
    if not analyses:
        st.info("No chunk data yet. Run a sync to fetch competitor prices.")
        return
    st.dataframe(chunks_frame(analyses), use_container_width=True, hide_index=True)
    for chunk in analyses:
        if not chunk.get("competitors"):
            continue
        with st.expander(f"Competitors for {chunk.get('checkIn') or '—'} → {chunk.get('checkOut') or '—'}"):
            st.dataframe(competitors_frame(chunk), use_container_width=True, hide_index=True)


def _render_snapshots_tab(snapshots: list) -> None:
    if not snapshots:
        st.info("No market snapshots yet. Run a sync to start collecting daily market data.")
        return
    st.subheader("Your Price vs Market")
    st.line_chart(snapshot_chart_frame(snapshots))
    st.dataframe(snapshots_frame(snapshots), use_container_width=True, hide_index=True)


def _render_suggestions_tab(suggestions: list) -> None:
    st.caption("Smart pricing suggestions based on market analysis")
    if not suggestions:
        st.info("No AI suggestions yet. Run a sync to generate recommendations.")
        return
    st.subheader("AI Recommended Prices")
    st.line_chart(suggestion_chart_frame(suggestions))
    st.dataframe(suggestions_frame(suggestions), use_container_width=True, hide_index=True)


def _render_calendar_tab(listing_id: str, audit_days: list) -> None:
    days = calendar_days(_fetch("calendar", lambda: client.get_listing_calendar(listing_id))) or audit_days
    if not days:
        st.info("No calendar data. Run a sync to fetch your listing's calendar.")
        return
    st.dataframe(calendar_frame(days), use_container_width=True, hide_index=True)


def _render_listing_actions(listing_id: str) -> None:
    actions = st.columns(2)
    outcome = None
    if actions[0].button("🔍 Validate data", use_container_width=True):
        outcome = console.validate_listing(listing_id)
    if actions[1].button("🔄 Retry all errors", use_container_width=True):
        outcome = console.retry_all_for_listing(listing_id)
    if outcome is not None:
        st.session_state.flash = command_flash(outcome)
        st.rerun()


def _render_listing_detail() -> None:
    listing_id: Optional[str] = st.session_state.selected_listing_id
    if not listing_id:
        st.info("Select a listing from the Overview or Data Quality pages.")
        return

    _show_flash()
    listing, data, counts = audit_sections(_fetch("listing audit", lambda: client.get_listing_audit(listing_id)))
    _render_listing_header(listing, listing_id)

    cols = st.columns(5)
    cols[0].metric("Days", counts.get("calendarDays") or 0)
    cols[1].metric("Competitors", counts.get("totalCompetitors") or 0)
    cols[2].metric("AI Tips", counts.get("aiSuggestions") or 0)
    cols[3].metric("Snapshots", counts.get("marketSnapshots") or 0)
    cols[4].metric("Chunks", counts.get("analyses") or 0)

    if not has_collected_data(counts):
        st.info('Run "Sync Market Data" from the overview page to fetch pricing data for this listing.')
    else:
        chunks_tab, snapshots_tab, ai_tab, calendar_tab = st.tabs(
            ["📦 Chunks", "📈 Market Snapshots", "🤖 AI Suggestions", "📅 Calendar"]
        )
        with chunks_tab:
            _render_chunks_tab(data.get("analyses") or [])
        with snapshots_tab:
            _render_snapshots_tab(data.get("marketSnapshots") or [])
        with ai_tab:
            _render_suggestions_tab(data.get("aiSuggestions") or [])
        with calendar_tab:
            _render_calendar_tab(listing_id, calendar_days(data))

    st.subheader("Data completeness")
    completeness = _fetch("completeness", lambda: client.fetch_completeness(listing_id))
    if completeness is not None:
        for label, value in completeness_bars(completeness.completeness):
            st.progress(value / 100, text=f"{label}: {format_percentage(value)}")
        for badge in missing_data_badges(completeness.missing_data):
            st.markdown(f"- {badge}")
        st.caption(f"Last validated: {format_datetime(completeness.last_validated)}")

    _render_listing_actions(listing_id)

    st.subheader("Errors")
    st.toggle("Include resolved", key="include_resolved")
    errors = _fetch(
        "listing errors",
        lambda: client.fetch_listing_errors(listing_id, include_resolved=st.session_state.include_resolved),
    )
    if errors is None:
        return
    if not errors:
        st.success("No errors recorded for this listing.")
        return
    st.dataframe(pending_errors_frame(errors), use_container_width=True, hide_index=True)


# ── Data quality ───────────────────────────────────────────────────────────
def _render_error_card(error) -> None:
    busy = console.is_busy(error.id)
    with st.container(border=True):
        head = st.columns([1, 7, 2, 1])
        head[0].markdown(f"## {kind_icon(error.error_type)}")
        head[1].markdown(f"**{error.listing_title or error.listing_id}**  \n{kind_label(error.error_type)}")
        head[2].markdown(status_badge(error.display_status or error.status))
        expanded = console.is_expanded(error.id)
        head[3].button(
            "▲" if expanded else "▼",
            key=f"expand-{error.id}",
            on_click=console.toggle_expanded,
            args=(error.id,),
        )

        st.markdown(error.message or "—")
        if expanded:
            details = {"Retries": retries_label(error)}
            if error.date:
                details["Date"] = format_date(error.date)
            if error.next_retry_at:
                details["Next Retry"] = format_datetime(error.next_retry_at)
            for label, value in details.items():
                st.markdown(f"**{label}:** {value}")

        buttons = st.columns(4)
        outcome = None
        if buttons[0].button(
            "..." if busy else "🔄 Retry",
            key=f"retry-{error.id}",
            disabled=not console.can_run(error, ErrorCommand.RETRY),
        ):
            outcome = console.retry(error)
        if buttons[1].button(
            "..." if busy else "✅ Resolve",
            key=f"resolve-{error.id}",
            disabled=not console.can_run(error, ErrorCommand.RESOLVE),
        ):
            outcome = console.resolve(error)
        if buttons[2].button(
            "..." if busy else "🚫 Ignore",
            key=f"ignore-{error.id}",
            disabled=not console.can_run(error, ErrorCommand.IGNORE),
        ):
            outcome = console.ignore(error)
        if outcome is not None:
            st.session_state.flash = command_flash(outcome)
            st.rerun()
        buttons[3].button(
            "👁️ View Listing",
            key=f"view-{error.id}",
            on_click=_open_listing,
            args=(error.listing_id,),
        )


def _render_pending_tab() -> None:
    errors = console.snapshot.pending_errors
    if not errors:
        st.success("✅ No pending errors! All data is up to date.")
        return
    if st.toggle("Table view", key="pending-table-view"):
        st.dataframe(pending_errors_frame(errors), use_container_width=True, hide_index=True)
        return
    for error in errors:
        _render_error_card(error)


def _render_issues_tab() -> None:
    items = console.snapshot.issue_listings
    if not items:
        st.success("✅ All listings have complete data!")
        return
    for item in items:
        listing = item.listing
        listing_id = listing.id if listing else ""
        title = listing.title if listing else "—"
        location = (listing.location if listing else None) or ""
        with st.container(border=True):
            st.markdown(f"**{title}**  \n{location}")
            for label, value in completeness_bars(item.completeness):
                st.progress(value / 100, text=f"{label}: {format_percentage(value)}")
            badges = missing_data_badges(item.missing_data)
            if badges:
                st.markdown(" · ".join(badges))
            footer = st.columns([3, 1])
            footer[0].caption(f"Last validated: {format_datetime(item.last_validated)}")
            if listing_id:
                footer[1].button(
                    "View Details →",
                    key=f"issue-view-{listing_id}",
                    on_click=_open_listing,
                    args=(listing_id,),
                )


def _render_incomplete_tab() -> None:
    listings = console.snapshot.incomplete_listings
    if not listings:
        st.success("✅ No missing calendars found!")
        return

    info, action = st.columns([3, 1])
    info.markdown(f"### Found {len(listings)} listings with missing calendar data")
    info.caption("These listings have competitor data but are missing your calendar/pricing data.")
    if action.button(
        "Starting Jobs..." if console.bulk_loading else "🔧 Fix All Calendars",
        disabled=console.bulk_loading,
        use_container_width=True,
    ):
        ack = console.fix_all_calendars()
        st.session_state.flash = ("success" if ack.started else "error", ack.message)
        st.rerun()

    st.dataframe(
        incomplete_frame(listings),
        use_container_width=True,
        hide_index=True,
        column_config={"Link": st.column_config.LinkColumn("Link", display_text="View on Airbnb ↗")},
    )


_TAB_RENDERERS = {
    ConsoleTab.PENDING: _render_pending_tab,
    ConsoleTab.ISSUES: _render_issues_tab,
    ConsoleTab.INCOMPLETE: _render_incomplete_tab,
}


def _render_data_quality() -> None:
    header, action = st.columns([4, 1])
    header.header("Data Quality & Errors")
    header.caption("Track and resolve data fetching issues")
    if action.button("🔄 Refresh", use_container_width=True):
        console.load()

    _show_flash()
    if console.last_load_error:
        st.warning(f"Showing last loaded data. Refresh failed: {console.last_load_error}")

    snapshot = console.snapshot
    cols = st.columns(4)
    for col, card in zip(cols, summary_cards(snapshot.summary)):
        col.metric(card.label, card.value)

    breakdown = kind_breakdown(snapshot.summary)
    if breakdown:
        st.subheader("Errors by Type")
        type_cols = st.columns(min(len(breakdown), 4))
        for idx, (icon, label, count) in enumerate(breakdown):
            type_cols[idx % 4].metric(f"{icon} {label}", count)

    labels = console.tab_labels()
    tabs = list(ConsoleTab)
    choice = st.radio(
        "View",
        tabs,
        index=tabs.index(console.active_tab),
        format_func=lambda tab: labels[tab],
        horizontal=True,
        label_visibility="collapsed",
    )
    _TAB_RENDERERS[console.select_tab(choice)]()


# ── Main content area ──────────────────────────────────────────────────────
_RENDERERS = {
    "Overview": _render_overview,
    "Market Analysis": _render_market_analysis,
    "Listing Detail": _render_listing_detail,
    "Data Quality": _render_data_quality,
}

_RENDERERS[st.session_state.page]()

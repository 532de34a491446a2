"""
dashboard/console/error_console.py

View-state and command dispatch for the data-quality console.

The console never updates displayed state optimistically: after a command
succeeds it reloads everything from the backend, and after a failure it keeps
the previous snapshot untouched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from dashboard.client.errors import ApiClientError
from dashboard.config import ConsoleSettings, get_console_settings
from dashboard.console.inflight import InFlightCommands
from dashboard.console.presentation import ConsoleTab, tab_label
from dashboard.domain.error_lifecycle import (
    ErrorCommand,
    InvalidTransitionError,
    allowed_commands,
    apply_command,
    is_terminal,
)
from dashboard.logging_utils import log_event
from dashboard.schemas.completeness import IncompleteListing, ListingCompleteness
from dashboard.schemas.errors import CommandAck, ErrorSummary, TrackedError

logger = logging.getLogger(__name__)

FIX_STARTED_MESSAGE = "Started background jobs to fix missing calendars. Check back in a few minutes."
FIX_FAILED_MESSAGE = "Failed to start fix jobs"
FIX_BUSY_MESSAGE = "Calendar fix jobs are already being started."


class ConsoleBackend(Protocol):
    """
    Subset of PricingAPIClient the console depends on.
    """

    def fetch_error_summary(self) -> ErrorSummary: ...

    def fetch_pending_errors(self) -> list[TrackedError]: ...

    def fetch_listings_with_issues(self) -> list[ListingCompleteness]: ...

    def fetch_incomplete_listings(self) -> list[IncompleteListing]: ...

    def resolve_error(self, error_id: str, notes: str = "") -> Any: ...

    def ignore_error(self, error_id: str, notes: str = "") -> Any: ...

    def retry_error(self, error_id: str) -> Any: ...

    def retry_all_listing_errors(self, listing_id: str) -> Any: ...

    def validate_listing_data(self, listing_id: str) -> Any: ...

    def fix_incomplete_calendars(self, listing_ids: Iterable[str] = ()) -> Any: ...

    def acknowledge(self, payload: Any, *, operation: str) -> CommandAck: ...


@dataclass(frozen=True)
class ConsoleSnapshot:
    """
    Everything the console renders, as returned by one full reload.
    """

    summary: ErrorSummary = field(default_factory=ErrorSummary)
    pending_errors: tuple[TrackedError, ...] = ()
    issue_listings: tuple[ListingCompleteness, ...] = ()
    incomplete_listings: tuple[IncompleteListing, ...] = ()
    loaded_at: datetime | None = None

    def counts(self) -> dict[ConsoleTab, int]:
        return {
            ConsoleTab.PENDING: len(self.pending_errors),
            ConsoleTab.ISSUES: len(self.issue_listings),
            ConsoleTab.INCOMPLETE: len(self.incomplete_listings),
        }

    def find_error(self, error_id: str) -> TrackedError | None:
        for error in self.pending_errors:
            if error.id == error_id:
                return error
        return None


@dataclass(frozen=True)
class CommandOutcome:
    """
    Result of one per-error or per-listing command.
    """

    command: str
    target_id: str
    status: str
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass(frozen=True)
class BulkFixAck:
    """
    Acknowledgment that calendar-fix jobs were (or were not) started.

    Job completion is never observed; the backend runs them asynchronously.
    """

    started: bool
    message: str
    listing_ids: tuple[str, ...] = ()


class ErrorConsole:
    """
    Client-side state machine behind the data-quality page.
    """

    def __init__(
        self,
        backend: ConsoleBackend,
        *,
        settings: ConsoleSettings | None = None,
        inflight: InFlightCommands | None = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or get_console_settings()
        self._inflight = inflight or InFlightCommands()
        self._lock = threading.Lock()
        self._snapshot = ConsoleSnapshot()
        self._generation = 0
        self._bulk_loading = False
        self._active_tab = ConsoleTab.PENDING
        self._expanded: set[str] = set()
        self.last_load_error: str | None = None

    # ── View state ─────────────────────────────────────────────────────────

    @property
    def snapshot(self) -> ConsoleSnapshot:
        return self._snapshot

    @property
    def active_tab(self) -> ConsoleTab:
        return self._active_tab

    @property
    def bulk_loading(self) -> bool:
        return self._bulk_loading

    @property
    def inflight(self) -> InFlightCommands:
        return self._inflight

    def select_tab(self, tab: ConsoleTab | str) -> ConsoleTab:
        self._active_tab = ConsoleTab(tab)
        return self._active_tab

    def toggle_expanded(self, row_id: str) -> bool:
        """
        Flip the expanded state of one row and return the new state.
        """

        if row_id in self._expanded:
            self._expanded.discard(row_id)
            return False
        self._expanded.add(row_id)
        return True

    def is_expanded(self, row_id: str) -> bool:
        return row_id in self._expanded

    def tab_labels(self) -> dict[ConsoleTab, str]:
        return {tab: tab_label(tab, count) for tab, count in self._snapshot.counts().items()}

    def is_busy(self, error_id: str) -> bool:
        return error_id in self._inflight

    def can_run(self, error: TrackedError, command: ErrorCommand) -> bool:
        if self.is_busy(error.id):
            return False
        return command in allowed_commands(error.display_status)

    # ── Loading ────────────────────────────────────────────────────────────

    def load(self) -> bool:
        """
        Reload the full console state.

        Returns False when the reload failed or was superseded by a newer
        one; the displayed snapshot is left unchanged in both cases.
        """

        with self._lock:
            self._generation += 1
            generation = self._generation

        try:
            summary = self._backend.fetch_error_summary()
            pending = self._backend.fetch_pending_errors()
            issues = self._backend.fetch_listings_with_issues()
            incomplete = self._backend.fetch_incomplete_listings()
        except ApiClientError as exc:
            logger.error("Failed to load error data: %s", exc)
            with self._lock:
                if generation == self._generation:
                    self.last_load_error = str(exc)
            return False

        visible = tuple(error for error in pending if not error.is_terminal)
        if len(visible) != len(pending):
            logger.warning(
                "Dropped %d closed error(s) returned by the pending endpoint",
                len(pending) - len(visible),
            )

        snapshot = ConsoleSnapshot(
            summary=summary,
            pending_errors=visible,
            issue_listings=tuple(issues),
            incomplete_listings=tuple(incomplete),
            loaded_at=datetime.now(timezone.utc),
        )

        with self._lock:
            if generation != self._generation:
                logger.info("Discarding superseded console load generation=%s", generation)
                return False
            self._snapshot = snapshot
            self.last_load_error = None
            known_rows = {error.id for error in visible} | {
                item.listing.id for item in issues if item.listing is not None
            }
            self._expanded &= known_rows
        return True

    # ── Per-error commands ─────────────────────────────────────────────────

    def resolve(self, error: TrackedError | str, note: str | None = None) -> CommandOutcome:
        error_id, refused = self._check_lifecycle(error, ErrorCommand.RESOLVE)
        if refused is not None:
            return refused
        notes = self._settings.resolve_note if note is None else note
        return self._dispatch(
            ErrorCommand.RESOLVE.value,
            error_id,
            lambda: self._backend.resolve_error(error_id, notes),
        )

    def ignore(self, error: TrackedError | str, note: str | None = None) -> CommandOutcome:
        error_id, refused = self._check_lifecycle(error, ErrorCommand.IGNORE)
        if refused is not None:
            return refused
        notes = self._settings.ignore_note if note is None else note
        return self._dispatch(
            ErrorCommand.IGNORE.value,
            error_id,
            lambda: self._backend.ignore_error(error_id, notes),
        )

    def retry(self, error: TrackedError | str) -> CommandOutcome:
        error_id, refused = self._check_lifecycle(error, ErrorCommand.RETRY)
        if refused is not None:
            return refused
        return self._dispatch(
            ErrorCommand.RETRY.value,
            error_id,
            lambda: self._backend.retry_error(error_id),
        )

    # ── Per-listing commands ───────────────────────────────────────────────

    def retry_all_for_listing(self, listing_id: str) -> CommandOutcome:
        return self._dispatch(
            "retry_all",
            listing_id,
            lambda: self._backend.retry_all_listing_errors(listing_id),
            key=f"listing:{listing_id}",
        )

    def validate_listing(self, listing_id: str) -> CommandOutcome:
        return self._dispatch(
            "validate",
            listing_id,
            lambda: self._backend.validate_listing_data(listing_id),
            key=f"listing:{listing_id}",
        )

    # ── Bulk remediation ───────────────────────────────────────────────────

    def fix_all_calendars(self, listing_ids: Iterable[str] = ()) -> BulkFixAck:
        """
        Start calendar-fix jobs for `listing_ids`, or for every incomplete
        listing when empty, and return once the backend accepted them.
        """

        ids = tuple(str(listing_id) for listing_id in listing_ids)
        with self._lock:
            if self._bulk_loading:
                return BulkFixAck(started=False, message=FIX_BUSY_MESSAGE, listing_ids=ids)
            self._bulk_loading = True

        try:
            payload = self._backend.fix_incomplete_calendars(ids)
            ack = self._backend.acknowledge(payload, operation="fix calendars")
        except ApiClientError as exc:
            log_event(logger, logging.ERROR, "fix_calendars_failed", listing_ids=list(ids), error=str(exc))
            return BulkFixAck(started=False, message=f"{FIX_FAILED_MESSAGE}: {exc}", listing_ids=ids)
        finally:
            with self._lock:
                self._bulk_loading = False

        log_event(logger, logging.INFO, "fix_calendars_started", listing_ids=list(ids))
        self.load()
        return BulkFixAck(started=True, message=ack.message or FIX_STARTED_MESSAGE, listing_ids=ids)

    # ── Internals ──────────────────────────────────────────────────────────

    def _check_lifecycle(
        self, error: TrackedError | str, command: ErrorCommand
    ) -> tuple[str, CommandOutcome | None]:
        """
        Refuse a command the record's status does not allow.

        `error` may be the record itself or an id looked up in the snapshot.
        Records that cannot be found or carry an unknown status are left to
        the backend.
        """

        if isinstance(error, TrackedError):
            error_id, record = error.id, error
        else:
            error_id, record = error, self._snapshot.find_error(error)
        current = record.display_status if record is not None else None
        if current is None:
            return error_id, None
        try:
            target = apply_command(current, command)
        except InvalidTransitionError as exc:
            log_event(logger, logging.WARNING, "console_command_rejected", command=command.value, target_id=error_id)
            return error_id, CommandOutcome(command.value, error_id, "rejected", str(exc))
        if target is current and is_terminal(current):
            return error_id, CommandOutcome(command.value, error_id, "skipped", f"Error is already {current.value}.")
        return error_id, None

    def _dispatch(
        self,
        command: str,
        target_id: str,
        call: Callable[[], Any],
        *,
        key: str | None = None,
    ) -> CommandOutcome:
        with self._inflight.claim(key or target_id) as acquired:
            if not acquired:
                log_event(logger, logging.INFO, "console_command_skipped", command=command, target_id=target_id)
                return CommandOutcome(command, target_id, "skipped", "A command is already in flight.")

            try:
                call()
            except ApiClientError as exc:
                log_event(
                    logger,
                    logging.ERROR,
                    "console_command_failed",
                    command=command,
                    target_id=target_id,
                    status_code=getattr(exc, "status_code", None),
                    error=str(exc),
                )
                return CommandOutcome(command, target_id, "failed", str(exc))

            log_event(logger, logging.INFO, "console_command_succeeded", command=command, target_id=target_id)
            self.load()
        return CommandOutcome(command, target_id, "succeeded")

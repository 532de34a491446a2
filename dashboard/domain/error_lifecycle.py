"""
dashboard/domain/error_lifecycle.py

Status state machine for tracked data-fetch errors.
"""

from __future__ import annotations

from enum import Enum


class ErrorStatus(str, Enum):
    """
    Lifecycle status of one tracked error.
    """

    PENDING = "PENDING"
    RETRYING = "RETRYING"
    FAILED = "FAILED"
    RESOLVED = "RESOLVED"
    IGNORED = "IGNORED"


class ErrorKind(str, Enum):
    """
    Kind of fetch or validation attempt that failed.
    """

    CALENDAR_FETCH = "CALENDAR_FETCH"
    COMPETITOR_FETCH = "COMPETITOR_FETCH"
    PRICE_FETCH = "PRICE_FETCH"
    LISTING_DATA = "LISTING_DATA"
    MARKET_DATA = "MARKET_DATA"
    AI_SUGGESTION = "AI_SUGGESTION"
    VALIDATION = "VALIDATION"


class ErrorCommand(str, Enum):
    """
    Operator commands that act on a single tracked error.
    """

    RESOLVE = "resolve"
    IGNORE = "ignore"
    RETRY = "retry"


class InvalidTransitionError(ValueError):
    """
    Raised when a status change is not allowed by the lifecycle.
    """

    def __init__(self, current: ErrorStatus, target: ErrorStatus | str) -> None:
        self.current = current
        self.target = target
        target_value = target.value if isinstance(target, Enum) else target
        super().__init__(f"Cannot move tracked error from {current.value} to {target_value}.")


TERMINAL_STATUSES = frozenset({ErrorStatus.RESOLVED, ErrorStatus.IGNORED})

_ALLOWED_TRANSITIONS: dict[ErrorStatus, frozenset[ErrorStatus]] = {
    ErrorStatus.PENDING: frozenset({ErrorStatus.RETRYING, ErrorStatus.RESOLVED, ErrorStatus.IGNORED}),
    ErrorStatus.RETRYING: frozenset(
        {ErrorStatus.PENDING, ErrorStatus.FAILED, ErrorStatus.RESOLVED, ErrorStatus.IGNORED}
    ),
    ErrorStatus.FAILED: frozenset({ErrorStatus.RETRYING, ErrorStatus.RESOLVED, ErrorStatus.IGNORED}),
    ErrorStatus.RESOLVED: frozenset(),
    ErrorStatus.IGNORED: frozenset(),
}

_COMMAND_TARGETS = {
    ErrorCommand.RESOLVE: ErrorStatus.RESOLVED,
    ErrorCommand.IGNORE: ErrorStatus.IGNORED,
    ErrorCommand.RETRY: ErrorStatus.RETRYING,
}


def parse_status(value: str | None) -> ErrorStatus | None:
    """
    Return the known status for a backend value, or None when unrecognised.
    """

    if not value:
        return None
    try:
        return ErrorStatus(value.strip().upper())
    except ValueError:
        return None


def parse_kind(value: str | None) -> ErrorKind | None:
    """
    Return the known error kind for a backend value, or None when unrecognised.
    """

    if not value:
        return None
    try:
        return ErrorKind(value.strip().upper())
    except ValueError:
        return None


def is_terminal(status: ErrorStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: ErrorStatus, target: ErrorStatus) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]


def transition(current: ErrorStatus, target: ErrorStatus) -> ErrorStatus:
    """
    Validate one status change and return the resulting status.

    Re-applying a terminal status to a record already in it is a no-op so
    that repeated resolve/ignore submissions stay idempotent.
    """

    if current is target and is_terminal(current):
        return current
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
    return target


def apply_command(current: ErrorStatus, command: ErrorCommand) -> ErrorStatus:
    """
    Return the status an operator command moves an error into.
    """

    return transition(current, _COMMAND_TARGETS[command])


def allowed_commands(status: ErrorStatus | None) -> tuple[ErrorCommand, ...]:
    """
    Return operator commands that make sense for the given status.

    Unknown statuses keep every command available and leave the decision to
    the backend.
    """

    if status is None:
        return tuple(ErrorCommand)
    return tuple(
        command
        for command in ErrorCommand
        if can_transition(status, _COMMAND_TARGETS[command])
    )


def status_after_retry_attempt(retry_count: int, max_retries: int) -> ErrorStatus:
    """
    Status of an error after `retry_count` attempts out of `max_retries`.

    A record may only be RETRYING while its count stays within the limit.
    """

    if retry_count > max_retries:
        return ErrorStatus.FAILED
    return ErrorStatus.RETRYING


def effective_status(
    status: ErrorStatus | None, retry_count: int, max_retries: int | None
) -> ErrorStatus | None:
    """
    Reconcile a reported status with the retry budget invariant.

    Records without a known retry budget keep their reported status.
    """

    if status is ErrorStatus.RETRYING and max_retries is not None:
        return status_after_retry_attempt(retry_count, max_retries)
    return status

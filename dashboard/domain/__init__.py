"""
Domain layer for tracked-error lifecycle rules.
"""

from dashboard.domain.error_lifecycle import (
    TERMINAL_STATUSES,
    ErrorCommand,
    ErrorKind,
    ErrorStatus,
    InvalidTransitionError,
    allowed_commands,
    apply_command,
    effective_status,
    is_terminal,
    parse_kind,
    parse_status,
    status_after_retry_attempt,
    transition,
)

__all__ = [
    "TERMINAL_STATUSES",
    "ErrorCommand",
    "ErrorKind",
    "ErrorStatus",
    "InvalidTransitionError",
    "allowed_commands",
    "apply_command",
    "effective_status",
    "is_terminal",
    "parse_kind",
    "parse_status",
    "status_after_retry_attempt",
    "transition",
]

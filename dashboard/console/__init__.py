"""
Data-quality console: view-state, command dispatch and display helpers.
"""

from dashboard.console.error_console import (
    BulkFixAck,
    CommandOutcome,
    ConsoleSnapshot,
    ErrorConsole,
)
from dashboard.console.inflight import InFlightCommands
from dashboard.console.presentation import ConsoleTab

__all__ = [
    "BulkFixAck",
    "CommandOutcome",
    "ConsoleSnapshot",
    "ConsoleTab",
    "ErrorConsole",
    "InFlightCommands",
]

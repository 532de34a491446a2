"""
Registry of commands currently in flight, keyed by target identifier.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class InFlightCommands:
    """
    Thread-safe set of identifiers that have a command in flight.
    """

    def __init__(self) -> None:
        self._ids: set[str] = set()
        self._lock = threading.Lock()

    def add(self, identifier: str) -> bool:
        """
        Mark `identifier` as busy. Returns False if it already was.
        """

        with self._lock:
            if identifier in self._ids:
                return False
            self._ids.add(identifier)
            return True

    def remove(self, identifier: str) -> None:
        with self._lock:
            self._ids.discard(identifier)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    @contextmanager
    def claim(self, identifier: str) -> Iterator[bool]:
        """
        Hold `identifier` for the duration of the block.

        Yields False without claiming when another command already holds it.
        """

        acquired = self.add(identifier)
        try:
            yield acquired
        finally:
            if acquired:
                self.remove(identifier)

"""
dashboard/client/auth.py

Bearer credential holder shared by every backend call.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from dashboard.client.errors import ApiAuthenticationError
from dashboard.config import BackendSettings

logger = logging.getLogger(__name__)

LoginExchange = Callable[[str, str], str]


class AuthSession:
    """
    Process-wide access token with a single-flight refresh guard.

    The token is optionally persisted to `token_path` so that it survives
    restarts of the dashboard process.
    """

    def __init__(
        self,
        *,
        email: str | None,
        password: str | None,
        token: str | None = None,
        token_path: Path | None = None,
    ) -> None:
        self._email = email
        self._password = password
        self._token_path = token_path
        self._lock = threading.Lock()
        self._token: str | None = token or self._read_token_file()

    @classmethod
    def from_settings(cls, settings: BackendSettings) -> "AuthSession":
        return cls(
            email=settings.auth_email,
            password=settings.auth_password,
            token_path=settings.token_path,
        )

    @property
    def token(self) -> str | None:
        return self._token

    def ensure(self, login: LoginExchange) -> str:
        """
        Return the current token, logging in first when none is held.
        """

        token = self._token
        if token:
            return token
        return self.refresh(None, login)

    def refresh(self, stale_token: str | None, login: LoginExchange) -> str:
        """
        Replace `stale_token` with a freshly issued one.

        When another caller already replaced the stale token, that newer token
        is returned without a second login.
        """

        with self._lock:
            if self._token and self._token != stale_token:
                return self._token

            if not self._email or not self._password:
                raise ApiAuthenticationError(
                    "Backend credentials are not configured. "
                    "Set DASHBOARD_AUTH_EMAIL and DASHBOARD_AUTH_PASSWORD."
                )

            self._discard_locked()
            token = login(self._email, self._password)
            if not token:
                raise ApiAuthenticationError("Login succeeded but no access token was returned.")

            self._token = token
            self._write_token_file(token)
            logger.info("Obtained backend access token email=%s", self._email)
            return token

    def clear(self) -> None:
        """
        Forget the current token and remove its persisted copy.
        """

        with self._lock:
            self._discard_locked()

    def _discard_locked(self) -> None:
        self._token = None
        if self._token_path is None:
            return
        try:
            self._token_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove token file path=%s error=%s", self._token_path, exc)

    def _read_token_file(self) -> str | None:
        if self._token_path is None or not self._token_path.exists():
            return None
        try:
            value = self._token_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning("Could not read token file path=%s error=%s", self._token_path, exc)
            return None
        return value or None

    def _write_token_file(self, token: str) -> None:
        if self._token_path is None:
            return
        try:
            self._token_path.parent.mkdir(parents=True, exist_ok=True)
            self._token_path.write_text(token, encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not persist token file path=%s error=%s", self._token_path, exc)

"""
dashboard/config.py

Environment-driven configuration for the dashboard and its API client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_RESOLVE_NOTE = "Manually resolved from dashboard"
DEFAULT_IGNORE_NOTE = "Ignored from dashboard"

ENV_DIR_VARIABLE = "DASHBOARD_ENV_DIR"
_DASHBOARD_KEY_PREFIX = "DASHBOARD_"
_SHARED_KEYS = frozenset({"LOG_LEVEL"})


def _dashboard_root() -> Path:
    override = os.getenv(ENV_DIR_VARIABLE, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parents[1]


def _is_dashboard_key(key: str) -> bool:
    return key.startswith(_DASHBOARD_KEY_PREFIX) or key in _SHARED_KEYS


def load_env_files(root: Path | None = None) -> list[Path]:
    """
    Load dashboard settings from `.env` then `.env.local` under `root`.

    `root` defaults to `DASHBOARD_ENV_DIR`, or the directory holding the
    `dashboard` package. Only `DASHBOARD_*` and `LOG_LEVEL` keys are taken.
    Variables already set in the process environment win, and
    `.env.local` fills in only what `.env` left unset.

    Returns the files that were read.
    """

    root = root or _dashboard_root()
    loaded: list[Path] = []
    for filename in (".env", ".env.local"):
        env_path = root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if line.startswith("export "):
                line = line[len("export "):].lstrip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = (part.strip() for part in line.split("=", 1))
            if _is_dashboard_key(key) and key not in os.environ:
                os.environ[key] = value.strip('"').strip("'")
        loaded.append(env_path)
    return loaded


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure dashboard `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class BackendSettings:
    """
    Connection and credential settings for the pricing backend.
    """

    base_url: str = DEFAULT_API_BASE_URL
    auth_email: str | None = None
    auth_password: str | None = None
    token_path: Path | None = None
    timeout_seconds: float = 15.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.auth_email and self.auth_password)


@dataclass(frozen=True)
class ConsoleSettings:
    """
    Operator-facing defaults for the error console.
    """

    resolve_note: str = DEFAULT_RESOLVE_NOTE
    ignore_note: str = DEFAULT_IGNORE_NOTE


@lru_cache(maxsize=1)
def get_backend_settings() -> BackendSettings:
    """
    Return cached backend settings from environment variables.
    """

    token_path = _get_optional_str_env("DASHBOARD_TOKEN_PATH")
    return BackendSettings(
        base_url=_get_str_env("DASHBOARD_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        auth_email=_get_optional_str_env("DASHBOARD_AUTH_EMAIL"),
        auth_password=_get_optional_str_env("DASHBOARD_AUTH_PASSWORD"),
        token_path=Path(token_path).expanduser() if token_path else None,
        timeout_seconds=max(1.0, _get_float_env("DASHBOARD_HTTP_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_console_settings() -> ConsoleSettings:
    """
    Return cached console settings from environment variables.
    """

    return ConsoleSettings(
        resolve_note=_get_str_env("DASHBOARD_RESOLVE_NOTE", DEFAULT_RESOLVE_NOTE),
        ignore_note=_get_str_env("DASHBOARD_IGNORE_NOTE", DEFAULT_IGNORE_NOTE),
    )

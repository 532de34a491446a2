from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from dashboard import config


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "DASHBOARD_API_BASE_URL",
        "DASHBOARD_AUTH_EMAIL",
        "DASHBOARD_AUTH_PASSWORD",
        "DASHBOARD_TOKEN_PATH",
        "DASHBOARD_HTTP_TIMEOUT_SECONDS",
        "DASHBOARD_RESOLVE_NOTE",
        "DASHBOARD_IGNORE_NOTE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_load_env_once", lambda: None)
    config.get_backend_settings.cache_clear()
    config.get_console_settings.cache_clear()
    yield
    config.get_backend_settings.cache_clear()
    config.get_console_settings.cache_clear()


def test_defaults() -> None:
    settings = config.get_backend_settings()

    assert settings.base_url == config.DEFAULT_API_BASE_URL
    assert settings.token_path is None
    assert settings.timeout_seconds == 15.0
    assert not settings.has_credentials
    assert config.get_console_settings().resolve_note == config.DEFAULT_RESOLVE_NOTE


def test_reads_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DASHBOARD_API_BASE_URL", "https://pricing.example.com/api/")
    monkeypatch.setenv("DASHBOARD_AUTH_EMAIL", "ops@example.com")
    monkeypatch.setenv("DASHBOARD_AUTH_PASSWORD", "pw")
    monkeypatch.setenv("DASHBOARD_TOKEN_PATH", str(tmp_path / "token"))
    monkeypatch.setenv("DASHBOARD_HTTP_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("DASHBOARD_IGNORE_NOTE", "Known gap")

    settings = config.get_backend_settings()

    assert settings.base_url == "https://pricing.example.com/api"
    assert settings.has_credentials
    assert settings.token_path == tmp_path / "token"
    assert settings.timeout_seconds == 30.0
    assert config.get_console_settings().ignore_note == "Known gap"


def test_invalid_and_too_small_timeouts_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DASHBOARD_HTTP_TIMEOUT_SECONDS", "soon")
    assert config.get_backend_settings().timeout_seconds == 15.0

    config.get_backend_settings.cache_clear()
    monkeypatch.setenv("DASHBOARD_HTTP_TIMEOUT_SECONDS", "0.1")
    assert config.get_backend_settings().timeout_seconds == 1.0


def test_blank_values_use_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DASHBOARD_API_BASE_URL", "   ")
    monkeypatch.setenv("DASHBOARD_AUTH_EMAIL", "")

    settings = config.get_backend_settings()

    assert settings.base_url == config.DEFAULT_API_BASE_URL
    assert settings.auth_email is None


@pytest.fixture()
def loaded_keys() -> Iterator[list[str]]:
    keys: list[str] = []
    yield keys
    for key in keys:
        os.environ.pop(key, None)


def test_env_files_fill_only_unset_dashboard_keys(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, loaded_keys: list[str]
) -> None:
    (tmp_path / ".env").write_text(
        "# comment\n"
        "DASHBOARD_AUTH_EMAIL=file@example.com\n"
        "export DASHBOARD_IGNORE_NOTE='From file'\n"
        "DATABASE_URL=postgres://backend-only\n",
        encoding="utf-8",
    )
    (tmp_path / ".env.local").write_text(
        "DASHBOARD_IGNORE_NOTE=From local\nDASHBOARD_RESOLVE_NOTE=\"Local resolve\"\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("DASHBOARD_AUTH_EMAIL", "env@example.com")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    loaded_keys.extend(["DASHBOARD_IGNORE_NOTE", "DASHBOARD_RESOLVE_NOTE", "DATABASE_URL"])

    loaded = config.load_env_files(tmp_path)

    assert loaded == [tmp_path / ".env", tmp_path / ".env.local"]
    assert os.environ["DASHBOARD_AUTH_EMAIL"] == "env@example.com"
    assert os.environ["DASHBOARD_IGNORE_NOTE"] == "From file"
    assert os.environ["DASHBOARD_RESOLVE_NOTE"] == "Local resolve"
    assert "DATABASE_URL" not in os.environ


def test_env_dir_override_locates_files(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, loaded_keys: list[str]
) -> None:
    (tmp_path / ".env").write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    monkeypatch.setenv(config.ENV_DIR_VARIABLE, str(tmp_path))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    loaded_keys.append("LOG_LEVEL")

    assert config.load_env_files() == [tmp_path / ".env"]
    assert os.environ["LOG_LEVEL"] == "DEBUG"


def test_default_root_is_the_dashboard_checkout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    package_dir = tmp_path / "dashboard"
    package_dir.mkdir()
    monkeypatch.delenv(config.ENV_DIR_VARIABLE, raising=False)
    monkeypatch.setattr(config, "__file__", str(package_dir / "config.py"))

    assert config.load_env_files() == []
    (tmp_path / ".env.local").write_text("# nothing yet\n", encoding="utf-8")
    assert config.load_env_files() == [tmp_path / ".env.local"]

from __future__ import annotations

import pytest
import requests

from dashboard.config import BackendSettings
from scripts import healthcheck
from tests.http_fakes import BASE_URL, FakeSession, make_response


@pytest.fixture(autouse=True)
def _backend_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(healthcheck, "get_backend_settings", lambda: BackendSettings(base_url=BASE_URL))
    monkeypatch.setenv("PORT", "8600")
    monkeypatch.delenv("HEALTHCHECK_PATH", raising=False)


def test_healthy_when_streamlit_and_backend_answer() -> None:
    session = FakeSession(make_response(200, text="ok"), make_response(404, {"error": "Not found"}))

    assert healthcheck.main([], session=session) == 0
    assert [call.url for call in session.calls] == ["http://127.0.0.1:8600/_stcore/health", BASE_URL]


def test_backend_server_error_is_unhealthy() -> None:
    session = FakeSession(make_response(200, text="ok"), make_response(503, text="down"))

    assert healthcheck.main([], session=session) == 1


def test_unreachable_backend_is_unhealthy() -> None:
    session = FakeSession(make_response(200, text="ok"), requests.ConnectionError("refused"))

    assert healthcheck.main([], session=session) == 1


def test_streamlit_failure_short_circuits() -> None:
    session = FakeSession(requests.Timeout("slow"))

    assert healthcheck.main([], session=session) == 1
    assert len(session.calls) == 1


def test_skip_backend_only_checks_streamlit() -> None:
    session = FakeSession(make_response(200, text="ok"))

    assert healthcheck.main(["--skip-backend"], session=session) == 0
    assert len(session.calls) == 1

"""
Container health check for the dashboard.

Exits 0 when Streamlit answers its health endpoint and, unless
`--skip-backend` is given, the pricing backend answers at all at the
configured base URL. Any HTTP status below 500 counts as reachable; the
backend has no unauthenticated health route.
"""

from __future__ import annotations

import argparse
import logging
import os

import requests

from dashboard.config import BackendSettings, get_backend_settings
from dashboard.logging_utils import configure_logging

logger = logging.getLogger(__name__)

STREAMLIT_HEALTH_PATH = "/_stcore/health"
CHECK_TIMEOUT_SECONDS = 2.0


def streamlit_url() -> str:
    port = os.getenv("PORT", "8501")
    path = os.getenv("HEALTHCHECK_PATH", STREAMLIT_HEALTH_PATH)
    return f"http://127.0.0.1:{port}{path}"


def check_dashboard(session: requests.Session, url: str) -> bool:
    try:
        response = session.request("GET", url, timeout=CHECK_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        logger.warning("Dashboard health check failed url=%s error=%s", url, exc)
        return False
    return 200 <= response.status_code < 400


def check_backend(session: requests.Session, settings: BackendSettings) -> bool:
    timeout = min(settings.timeout_seconds, CHECK_TIMEOUT_SECONDS)
    try:
        response = session.request("GET", settings.base_url, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Backend unreachable base_url=%s error=%s", settings.base_url, exc)
        return False
    if response.status_code >= 500:
        logger.warning("Backend unhealthy base_url=%s status=%s", settings.base_url, response.status_code)
        return False
    return True


def main(argv: list[str] | None = None, session: requests.Session | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check the dashboard and its pricing backend.")
    parser.add_argument(
        "--skip-backend",
        action="store_true",
        help="Only check that Streamlit is serving.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    session = session or requests.Session()
    if not check_dashboard(session, streamlit_url()):
        return 1
    if not args.skip_backend and not check_backend(session, get_backend_settings()):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

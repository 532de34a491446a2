"""
dashboard/client/base.py

Shared HTTP mechanics for the pricing backend: bearer auth, the login
exchange and the single re-authentication retry on 401.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from dashboard.client.auth import AuthSession
from dashboard.client.errors import (
    ApiAuthenticationError,
    ApiClientError,
    ApiRequestError,
    ApiResponseError,
    ApiTransportError,
)
from dashboard.config import BackendSettings

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
_MESSAGE_KEYS = ("error", "message", "detail")


def extract_backend_message(response: requests.Response) -> str:
    """
    Return the human message a backend error response carries.
    """

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        for key in _MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    text = (response.text or "").strip()
    if text:
        return text
    return response.reason or f"HTTP {response.status_code}"


class BaseAPIClient:
    """
    Authenticated JSON request helper for the pricing backend.
    """

    def __init__(
        self,
        *,
        settings: BackendSettings,
        auth: AuthSession,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = settings.base_url.rstrip("/")
        self._timeout_seconds = settings.timeout_seconds
        self._auth = auth
        self._session = session or requests.Session()

    @property
    def auth(self) -> AuthSession:
        return self._auth

    def login(self, email: str, password: str) -> str:
        """
        Exchange credentials for an access token.
        """

        try:
            response = self._session.request(
                method="POST",
                url=self._url(LOGIN_PATH),
                json={"email": email, "password": password},
                headers={"Content-Type": "application/json"},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Backend login transport failure url=%s error=%s", self._url(LOGIN_PATH), exc)
            raise ApiTransportError(f"POST {LOGIN_PATH}: {exc}") from exc

        if not response.ok:
            message = extract_backend_message(response)
            logger.error("Backend login rejected status=%s message=%s", response.status_code, message)
            raise ApiAuthenticationError(
                f"Login failed with HTTP {response.status_code}: {message}",
                status_code=response.status_code,
            )

        payload = self._decode(response, method="POST", path=LOGIN_PATH)
        token = payload.get("accessToken") if isinstance(payload, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise ApiAuthenticationError("Login response did not include an accessToken.")
        return token.strip()

    def _request_json(
        self,
        *,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Execute an authenticated request and return the parsed JSON body.

        A 401 discards the credential and triggers exactly one
        re-authentication followed by one retry of the request.
        """

        token = self._auth.ensure(self.login)
        try:
            return self._send(method=method, path=path, token=token, params=params, json_body=json_body)
        except ApiRequestError as exc:
            if not exc.is_unauthorized:
                raise
            logger.warning("Backend rejected credential method=%s path=%s; re-authenticating", method, path)
            try:
                fresh_token = self._auth.refresh(token, self.login)
            except ApiClientError as login_exc:
                raise exc from login_exc

        return self._send(method=method, path=path, token=fresh_token, params=params, json_body=json_body)

    def _send(
        self,
        *,
        method: str,
        path: str,
        token: str,
        params: dict[str, Any] | None,
        json_body: dict[str, Any] | None,
    ) -> Any:
        url = self._url(path)
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Backend transport failure method=%s url=%s error=%s", method, url, exc)
            raise ApiTransportError(f"{method} {path}: {exc}") from exc

        if not response.ok:
            message = extract_backend_message(response)
            if response.status_code != 401:
                logger.error(
                    "Backend request failed method=%s status=%s url=%s message=%s",
                    method,
                    response.status_code,
                    url,
                    message,
                )
            raise ApiRequestError(response.status_code, message, method=method, path=path)

        return self._decode(response, method=method, path=path)

    @staticmethod
    def _decode(response: requests.Response, *, method: str, path: str) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ApiResponseError(f"{method} {path}: response was not valid JSON.") from exc

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

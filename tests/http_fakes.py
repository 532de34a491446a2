"""
In-process stand-in for requests.Session that replays queued responses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests

BASE_URL = "http://backend.test/api"


def make_response(status_code: int = 200, body: Any = None, *, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = BASE_URL
    if text is not None:
        response._content = text.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


@dataclass
class RecordedCall:
    method: str
    url: str
    params: dict[str, Any] | None
    json: Any
    headers: dict[str, str] | None

    @property
    def path(self) -> str:
        return self.url[len(BASE_URL):]


class FakeSession:
    """
    Replays queued responses (or raises queued exceptions) in order.
    """

    def __init__(self, *responses: requests.Response | Exception) -> None:
        self.calls: list[RecordedCall] = []
        self._queue = list(responses)

    def queue(self, *responses: requests.Response | Exception) -> None:
        self._queue.extend(responses)

    def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        self.calls.append(RecordedCall(method, url, params, json, headers))
        if not self._queue:
            raise AssertionError(f"Unexpected request {method} {url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def calls_to(self, path: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.path == path]

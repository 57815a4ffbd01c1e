from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests


@dataclass(frozen=True)
class HttpResult:
    status_code: int
    headers: dict[str, str]
    body_bytes: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body_bytes.decode("utf-8"))


def _result(resp: requests.Response) -> HttpResult:
    return HttpResult(
        status_code=int(resp.status_code),
        headers={k.lower(): v for k, v in resp.headers.items()},
        body_bytes=resp.content,
    )


class HttpClient:
    """Small wrapper around requests with a fixed timeout.

    This module is standalone and does not import the server code.
    """

    def __init__(self, *, timeout_seconds: float, session: requests.Session | None = None):
        self._timeout_seconds = float(timeout_seconds)
        self._session = session or requests.Session()

    def get(self, url: str) -> HttpResult:
        return _result(self._session.get(url, timeout=self._timeout_seconds))

    def post_json(self, url: str, payload: dict[str, Any], *, headers: dict[str, str] | None = None) -> HttpResult:
        resp = self._session.post(url, json=payload, headers=headers, timeout=self._timeout_seconds)
        return _result(resp)

    def post_multipart(
        self,
        url: str,
        *,
        files: dict[str, Any],
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResult:
        resp = self._session.post(url, files=files, data=data or {}, headers=headers, timeout=self._timeout_seconds)
        return _result(resp)

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable

import requests

DEFAULT_MODEL = "black-forest-labs/flux-kontext-pro"
DEFAULT_BASE_URL = "https://api.replicate.com/v1"


@dataclass(frozen=True)
class ReplicateSettings:
    api_token: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_env(cls) -> "ReplicateSettings":
        # A missing token is not fatal at startup; requests fail with a
        # configuration error instead.
        api_token = (os.getenv("REPLICATE_API_TOKEN") or "").strip()
        model = (os.getenv("REPLICATE_MODEL") or DEFAULT_MODEL).strip() or DEFAULT_MODEL
        base_url = (os.getenv("REPLICATE_BASE_URL") or DEFAULT_BASE_URL).strip().rstrip("/") or DEFAULT_BASE_URL
        return cls(api_token=api_token, model=model, base_url=base_url)

    @property
    def configured(self) -> bool:
        return bool(self.api_token)

    @property
    def predictions_url(self) -> str:
        return f"{self.base_url}/models/{self.model}/predictions"


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)


class ReplicateClient:
    """Blocking client for Replicate's model predictions endpoint.

    Asks the API to hold the connection until the prediction finishes
    (``Prefer: wait``) instead of polling. One attempt, no timeout: run it in
    a worker thread.
    """

    def __init__(
        self,
        *,
        settings: ReplicateSettings,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.settings = settings
        # A fresh session per call; Session is not shared across worker threads.
        self._session_factory = session_factory

    @classmethod
    def from_env(cls) -> "ReplicateClient":
        return cls(settings=ReplicateSettings.from_env())

    def create_prediction(self, model_input: dict[str, Any]) -> UpstreamResponse:
        with self._session_factory() as session:
            resp = session.post(
                self.settings.predictions_url,
                headers={
                    "Authorization": f"Bearer {self.settings.api_token}",
                    "Content-Type": "application/json",
                    "Prefer": "wait",
                },
                json={"input": model_input},
            )
        return UpstreamResponse(status_code=int(resp.status_code), text=resp.text)

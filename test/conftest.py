from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.deps import get_replicate, get_storage, get_supabase
from app.core.errors.exceptions import UnauthenticatedError
from app.core.identity.supabase_client import AuthenticatedUser, UploadRecord
from app.core.inference.replicate import ReplicateClient, ReplicateSettings
from app.main import create_app

VALID_TOKEN = "valid-token"
USER_ID = "5b1f7a52-user"


class FakeStorage:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[dict[str, Any]] = []

    def upload_bytes(self, *, key, data, content_type=None, cache_control=None, overwrite=True) -> None:
        if self.fail:
            raise RuntimeError("bucket unavailable")
        self.uploads.append(
            {
                "key": key,
                "size": len(data),
                "content_type": content_type,
                "cache_control": cache_control,
                "overwrite": overwrite,
            }
        )

    def public_url(self, *, key: str) -> str:
        return f"https://cdn.example.com/{key}"


class FakeSupabase:
    def __init__(self, *, record_fails: bool = False) -> None:
        self.record_fails = record_fails
        self.records: list[tuple[str, UploadRecord]] = []

    def get_user(self, access_token: str) -> AuthenticatedUser:
        if access_token != VALID_TOKEN:
            raise UnauthenticatedError()
        return AuthenticatedUser(id=USER_ID, email="user@example.com")

    def record_upload(self, user_id: str, record: UploadRecord) -> bool:
        if self.record_fails:
            raise RuntimeError("insert failed")
        self.records.append((user_id, record))
        return True


@dataclass
class FakeResponse:
    status_code: int
    text: str


@dataclass
class FakeSession:
    status_code: int = 201
    body: Any = field(default_factory=dict)
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)
    opened: int = 0
    closed: int = 0

    def __enter__(self):
        self.opened += 1
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def post(self, url, *, headers=None, json=None, **kwargs):
        self.calls.append({"url": url, "headers": headers, "json": json, **kwargs})
        if self.error is not None:
            raise self.error
        text = self.body if isinstance(self.body, str) else _dumps(self.body)
        return FakeResponse(status_code=self.status_code, text=text)

    def close(self) -> None:
        self.closed += 1


def _dumps(obj: Any) -> str:
    return json.dumps(obj)


def make_replicate(session: FakeSession, *, api_token: str = "r8_test") -> ReplicateClient:
    return ReplicateClient(settings=ReplicateSettings(api_token=api_token), session_factory=lambda: session)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def app(settings, storage, supabase, session):
    app = create_app(settings)
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_supabase] = lambda: supabase
    app.dependency_overrides[get_replicate] = lambda: make_replicate(session)
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}

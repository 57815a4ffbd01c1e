from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from botocore.stub import ANY, Stubber

from app.core.config import Settings, normalize_prefix
from app.core.errors.exceptions import ConfigurationError, UnauthenticatedError
from app.core.identity.supabase_client import SupabaseGateway, SupabaseSettings, UploadRecord
from app.core.inference.replicate import ReplicateSettings
from app.core.storage.r2 import R2Settings, R2Storage


def _r2(public_base_url: str = "") -> R2Storage:
    return R2Storage(
        settings=R2Settings(
            account_id="acc",
            access_key_id="key",
            secret_access_key="secret",
            bucket_name="ai-images",
            endpoint_url="https://acc.r2.cloudflarestorage.com",
            public_base_url=public_base_url,
        )
    )


def test_r2_upload_without_overwrite_is_conditional():
    storage = _r2()
    with Stubber(storage.client) as stub:
        stub.add_response(
            "put_object",
            {"ETag": '"etag"'},
            {
                "Bucket": "ai-images",
                "Key": "u1/1-abc.png",
                "Body": ANY,
                "ContentType": "image/png",
                "CacheControl": "max-age=3600",
                "IfNoneMatch": "*",
            },
        )
        storage.upload_bytes(
            key="u1/1-abc.png",
            data=b"data",
            content_type="image/png",
            cache_control="max-age=3600",
            overwrite=False,
        )
        stub.assert_no_pending_responses()


def test_r2_existing_key_raises():
    storage = _r2()
    with Stubber(storage.client) as stub:
        stub.add_client_error("put_object", service_error_code="PreconditionFailed", http_status_code=412)
        with pytest.raises(ClientError):
            storage.upload_bytes(key="u1/dup.png", data=b"x", overwrite=False)


def test_r2_public_url_uses_public_base():
    storage = _r2("https://pub-123.r2.dev")
    assert storage.public_url(key="u1/a b.png") == "https://pub-123.r2.dev/u1/a%20b.png"


def test_r2_public_url_falls_back_to_presigned():
    url = _r2().public_url(key="u1/a.png")
    assert "u1/a.png" in url
    assert "X-Amz-Signature" in url


def test_r2_settings_report_missing(monkeypatch):
    for name in ("R2_ACCOUNT_ID", "R2_ENDPOINT_URL", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_BUCKET_NAME"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("R2_ACCOUNT_ID", "acc")

    with pytest.raises(ConfigurationError) as excinfo:
        R2Settings.from_env()
    assert excinfo.value.detail == {"missing": ["R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "R2_BUCKET_NAME"]}


def _gateway() -> tuple[SupabaseGateway, MagicMock]:
    client = MagicMock()
    return SupabaseGateway(settings=SupabaseSettings(url="https://x.supabase.co", key="k"), client=client), client


def test_supabase_get_user():
    gateway, client = _gateway()
    client.auth.get_user.return_value = SimpleNamespace(user=SimpleNamespace(id="u1", email="a@b.c"))

    user = gateway.get_user("jwt")

    assert user.id == "u1"
    client.auth.get_user.assert_called_once_with("jwt")


@pytest.mark.parametrize("response", [SimpleNamespace(user=None), None])
def test_supabase_get_user_without_user(response):
    gateway, client = _gateway()
    client.auth.get_user.return_value = response
    with pytest.raises(UnauthenticatedError):
        gateway.get_user("jwt")


def test_supabase_rejected_token():
    gateway, client = _gateway()
    client.auth.get_user.side_effect = RuntimeError("invalid JWT")
    with pytest.raises(UnauthenticatedError):
        gateway.get_user("jwt")


def _record() -> UploadRecord:
    return UploadRecord(
        filename="cat.png",
        file_path="u1/1-abc.png",
        file_url="https://cdn/u1/1-abc.png",
        file_size=10,
        mime_type="image/png",
    )


def test_supabase_record_upload_inserts_for_customer():
    gateway, client = _gateway()
    table = client.table.return_value
    table.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = [{"id": 7}]

    assert gateway.record_upload("u1", _record()) is True

    table.select.return_value.eq.assert_called_once_with("user_id", "u1")
    table.insert.assert_called_once_with(
        {
            "customer_id": 7,
            "filename": "cat.png",
            "file_path": "u1/1-abc.png",
            "file_url": "https://cdn/u1/1-abc.png",
            "file_size": 10,
            "mime_type": "image/png",
            "upload_source": "web_upload",
        }
    )


def test_supabase_record_upload_skips_without_customer():
    gateway, client = _gateway()
    table = client.table.return_value
    table.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = []

    assert gateway.record_upload("u1", _record()) is False
    table.insert.assert_not_called()


def test_replicate_settings_from_env(monkeypatch):
    monkeypatch.delenv("REPLICATE_API_TOKEN", raising=False)
    monkeypatch.delenv("REPLICATE_MODEL", raising=False)
    monkeypatch.setenv("REPLICATE_BASE_URL", "https://proxy.example.com/v1/")

    settings = ReplicateSettings.from_env()

    assert not settings.configured
    assert settings.predictions_url == "https://proxy.example.com/v1/models/black-forest-labs/flux-kontext-pro/predictions"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("UPLOAD_REMOTE_PREFIX", "/ai-images")
    monkeypatch.setenv("UPLOAD_MAX_BYTES", "not-a-number")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.upload_remote_prefix == "ai-images/"
    assert settings.upload_max_bytes == 10 * 1024 * 1024
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("raw, expected", [("", ""), ("  ", ""), ("a", "a/"), ("a/b/", "a/b/"), ("/a", "a/")])
def test_normalize_prefix(raw, expected):
    assert normalize_prefix(raw) == expected

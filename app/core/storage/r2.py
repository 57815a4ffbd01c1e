from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import boto3
from botocore.client import Config

from app.core.errors.exceptions import ConfigurationError


@dataclass(frozen=True)
class R2Settings:
    account_id: str
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: str
    public_base_url: str = ""
    presigned_expires_in: int = 86400

    @classmethod
    def from_env(cls) -> "R2Settings":
        account_id = (os.getenv("R2_ACCOUNT_ID") or "").strip()
        access_key_id = (os.getenv("R2_ACCESS_KEY_ID") or "").strip()
        secret_access_key = (os.getenv("R2_SECRET_ACCESS_KEY") or "").strip()
        bucket_name = (os.getenv("R2_BUCKET_NAME") or "").strip()
        public_base_url = (os.getenv("R2_PUBLIC_BASE_URL") or "").strip().rstrip("/")

        endpoint_url = (os.getenv("R2_ENDPOINT_URL") or "").strip()
        if not endpoint_url and account_id:
            endpoint_url = f"https://{account_id}.r2.cloudflarestorage.com"

        missing: list[str] = []
        if not account_id and not endpoint_url:
            missing.append("R2_ACCOUNT_ID (or R2_ENDPOINT_URL)")
        if not access_key_id:
            missing.append("R2_ACCESS_KEY_ID")
        if not secret_access_key:
            missing.append("R2_SECRET_ACCESS_KEY")
        if not bucket_name:
            missing.append("R2_BUCKET_NAME")

        if missing:
            raise ConfigurationError(
                "Missing Cloudflare R2 configuration",
                detail={"missing": missing},
            )

        return cls(
            account_id=account_id,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            bucket_name=bucket_name,
            endpoint_url=endpoint_url,
            public_base_url=public_base_url,
        )


class R2Storage:
    def __init__(self, *, settings: R2Settings, client: Any | None = None) -> None:
        self.settings = settings
        self.client = client or boto3.client(
            "s3",
            endpoint_url=settings.endpoint_url,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key,
            region_name="auto",
            config=Config(signature_version="s3v4"),
        )

    @classmethod
    def from_env(cls) -> "R2Storage":
        return cls(settings=R2Settings.from_env())

    @property
    def bucket(self) -> str:
        return self.settings.bucket_name

    def upload_bytes(
        self,
        *,
        key: str,
        data: bytes,
        content_type: str | None = None,
        cache_control: str | None = None,
        overwrite: bool = True,
    ) -> None:
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type
        if cache_control:
            extra["CacheControl"] = cache_control
        if not overwrite:
            # Conditional write: R2 answers 412 if the key already exists.
            extra["IfNoneMatch"] = "*"

        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)

    def public_url(self, *, key: str) -> str:
        if self.settings.public_base_url:
            return f"{self.settings.public_base_url}/{quote(key)}"
        return self.presigned_get_url(key=key, expires_in=self.settings.presigned_expires_in)

    def presigned_get_url(self, *, key: str, expires_in: int = 86400) -> str:
        if expires_in < 1:
            raise ValueError("expires_in must be >= 1")

        return self.client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

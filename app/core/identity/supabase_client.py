"""Supabase-backed identity and upload metadata.

Supabase plays two collaborator roles for the upload flow:

- resolving a bearer access token to the signed-in user (Supabase Auth);
- recording upload metadata against the user's customer row.

The SDK is synchronous; callers run these methods in a worker thread.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from supabase import Client, create_client

from app.core.errors.exceptions import ConfigurationError, UnauthenticatedError

logger = logging.getLogger(__name__)

CUSTOMERS_TABLE = "customers"
USER_UPLOADS_TABLE = "user_uploads"


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    key: str

    @classmethod
    def from_env(cls) -> "SupabaseSettings":
        url = (os.getenv("SUPABASE_URL") or "").strip()
        # The server needs to read `customers` and write `user_uploads` on behalf
        # of any user, so prefer the service-role key.
        key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY") or "").strip()

        missing: list[str] = []
        if not url:
            missing.append("SUPABASE_URL")
        if not key:
            missing.append("SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY)")
        if missing:
            raise ConfigurationError("Missing Supabase configuration", detail={"missing": missing})

        return cls(url=url, key=key)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None


@dataclass(frozen=True)
class UploadRecord:
    filename: str
    file_path: str
    file_url: str
    file_size: int
    mime_type: str
    upload_source: str = "web_upload"


class SupabaseGateway:
    def __init__(self, *, settings: SupabaseSettings, client: Client | None = None) -> None:
        self.settings = settings
        self.client = client or create_client(settings.url, settings.key)

    @classmethod
    def from_env(cls) -> "SupabaseGateway":
        return cls(settings=SupabaseSettings.from_env())

    def get_user(self, access_token: str) -> AuthenticatedUser:
        try:
            resp = self.client.auth.get_user(access_token)
        except Exception as exc:
            raise UnauthenticatedError(cause=exc) from exc

        user = getattr(resp, "user", None)
        if user is None or not getattr(user, "id", None):
            raise UnauthenticatedError()
        return AuthenticatedUser(id=str(user.id), email=getattr(user, "email", None))

    def find_customer_id(self, user_id: str) -> Any | None:
        resp = self.client.table(CUSTOMERS_TABLE).select("id").eq("user_id", user_id).limit(1).execute()
        rows = resp.data or []
        if not rows:
            return None
        return rows[0].get("id")

    def record_upload(self, user_id: str, record: UploadRecord) -> bool:
        """Insert an upload row for the user's customer.

        Returns False when the user has no customer row; nothing is written then.
        """
        customer_id = self.find_customer_id(user_id)
        if customer_id is None:
            logger.info("No customer row for user %s; upload metadata not recorded", user_id)
            return False

        self.client.table(USER_UPLOADS_TABLE).insert(
            {
                "customer_id": customer_id,
                "filename": record.filename,
                "file_path": record.file_path,
                "file_url": record.file_url,
                "file_size": record.file_size,
                "mime_type": record.mime_type,
                "upload_source": record.upload_source,
            }
        ).execute()
        return True

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass
from functools import partial

import anyio
from fastapi import UploadFile

from app.core.best_effort import BestEffortOutcome, run_best_effort
from app.core.config import Settings
from app.core.errors.exceptions import InvalidInputError, StorageError
from app.core.identity.supabase_client import AuthenticatedUser, SupabaseGateway, UploadRecord
from app.core.storage.r2 import R2Storage

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"

_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,16}$")


@dataclass(frozen=True)
class UploadedAsset:
    url: str
    path: str
    filename: str
    size: int
    mime_type: str
    metadata: BestEffortOutcome | None = None


def _safe_extension(filename: str | None) -> str:
    name = (filename or "").strip()
    if "." not in name:
        return DEFAULT_EXTENSION
    ext = name.rsplit(".", 1)[1]
    if not _EXTENSION_RE.match(ext):
        return DEFAULT_EXTENSION
    return ext


def make_storage_filename(original: str | None, *, now_ms: int | None = None) -> str:
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = uuid.uuid4().hex[:13]
    return f"{timestamp}-{suffix}.{_safe_extension(original)}"


def make_storage_key(*, user_id: str, filename: str, prefix: str = "") -> str:
    # Per-user folder keeps uploads isolated.
    return f"{prefix}{user_id}/{filename}"


def _format_limit(max_bytes: int) -> str:
    mib = 1024 * 1024
    if max_bytes >= mib and max_bytes % mib == 0:
        return f"{max_bytes // mib}MB"
    return f"{max_bytes} bytes"


def validate_image(file: UploadFile, *, size: int | None, max_bytes: int) -> None:
    if not (file.content_type or "").startswith("image/"):
        raise InvalidInputError("File must be an image")
    if size is not None and size > max_bytes:
        raise InvalidInputError(f"File size must be less than {_format_limit(max_bytes)}")


async def upload_image(
    file: UploadFile | None,
    *,
    user: AuthenticatedUser,
    storage: R2Storage,
    settings: Settings,
    supabase: SupabaseGateway | None = None,
) -> UploadedAsset:
    if file is None:
        raise InvalidInputError("No image file provided")

    max_bytes = settings.upload_max_bytes
    # Reject on the declared size first, then never buffer more than the limit.
    validate_image(file, size=file.size, max_bytes=max_bytes)
    raw = await file.read(max_bytes + 1)
    validate_image(file, size=len(raw), max_bytes=max_bytes)
    content_type = file.content_type or ""

    filename = make_storage_filename(file.filename)
    key = make_storage_key(user_id=user.id, filename=filename, prefix=settings.upload_remote_prefix)

    # boto3 is sync; run in worker thread.
    upload = partial(
        storage.upload_bytes,
        key=key,
        data=raw,
        content_type=content_type,
        cache_control=settings.upload_cache_control,
        overwrite=False,
    )
    try:
        await anyio.to_thread.run_sync(upload)
        url = await anyio.to_thread.run_sync(partial(storage.public_url, key=key))
    except Exception as exc:
        logger.error("Storage upload failed: key=%s error=%r", key, exc)
        raise StorageError(cause=exc) from exc

    metadata = None
    if supabase is not None:
        record = UploadRecord(
            filename=file.filename or filename,
            file_path=key,
            file_url=url,
            file_size=len(raw),
            mime_type=content_type,
            upload_source=settings.upload_source,
        )
        metadata = await run_best_effort("record_upload", supabase.record_upload, user.id, record)

    logger.info("Uploaded image: key=%s size=%d type=%s", key, len(raw), content_type)
    return UploadedAsset(
        url=url,
        path=key,
        filename=filename,
        size=len(raw),
        mime_type=content_type,
        metadata=metadata,
    )

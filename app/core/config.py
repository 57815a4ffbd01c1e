from __future__ import annotations

import os

from pydantic import BaseModel

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def env_truthy(name: str, default: str = "0") -> bool:
    value = (os.getenv(name, default) or "").strip().lower()
    return value in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw)
    except Exception:
        return default


def normalize_prefix(prefix: str) -> str:
    prefix = (prefix or "").strip()
    if not prefix:
        return ""
    # Allow either "uploads/ai" or "uploads/ai/".
    if not prefix.endswith("/"):
        prefix += "/"
    return prefix.lstrip("/")


class Settings(BaseModel):
    log_level: str = "INFO"
    upload_max_bytes: int = MAX_UPLOAD_BYTES
    upload_remote_prefix: str = ""
    upload_cache_control: str = "max-age=3600"
    upload_source: str = "web_upload"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
            upload_max_bytes=_env_int("UPLOAD_MAX_BYTES", MAX_UPLOAD_BYTES),
            upload_remote_prefix=normalize_prefix(os.getenv("UPLOAD_REMOTE_PREFIX", "")),
            upload_cache_control=(os.getenv("UPLOAD_CACHE_CONTROL") or "max-age=3600").strip(),
        )

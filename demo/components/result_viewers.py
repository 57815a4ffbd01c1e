from __future__ import annotations

import json
from typing import Any


def safe_json_or_text(data: bytes) -> Any:
    if not data:
        return {}
    try:
        return json.loads(data.decode("utf-8"))
    except Exception:
        text = data.decode("utf-8", errors="replace").strip()
        if not text:
            return {}
        return text


def error_message(data: bytes, *, fallback: str) -> str:
    body = safe_json_or_text(data)
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback

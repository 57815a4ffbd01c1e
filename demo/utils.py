from __future__ import annotations

from urllib.parse import urljoin


def normalize_base_url(raw: str) -> str:
    url = (raw or "").strip()
    if not url:
        return "http://localhost:8000"
    if url.endswith("/"):
        url = url[:-1]
    return url


def join_api(base_url: str, path: str) -> str:
    base = normalize_base_url(base_url) + "/"
    return urljoin(base, path.lstrip("/"))


def bearer_headers(access_token: str | None) -> dict[str, str]:
    token = (access_token or "").strip()
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}

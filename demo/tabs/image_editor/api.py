from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from demo.components.result_viewers import error_message, safe_json_or_text
from demo.http_client import HttpClient, HttpResult
from demo.utils import bearer_headers, join_api

OUTPUT_FORMAT_CHOICES = ["jpg", "png", "webp"]
ASPECT_RATIO_CHOICES = ["1:1", "16:9", "21:9", "3:2", "4:3", "9:16", "2:3"]


@dataclass(frozen=True)
class EditorOutcome:
    status: str
    message: str
    output_url: str | None = None
    response: Any = None


def upload_image(*, client: HttpClient, base_url: str, image_path: str, access_token: str) -> HttpResult:
    url = join_api(base_url, "/v1/images/upload")
    path = Path(image_path)
    guessed, _ = mimetypes.guess_type(str(path))
    content_type = guessed or "image/jpeg"
    filename = path.name or "image.jpg"
    with open(image_path, "rb") as f:
        files = {"image": (filename, f, content_type)}
        return client.post_multipart(url, files=files, headers=bearer_headers(access_token))


def build_generate_payload(
    *,
    prompt: str,
    image_url: str | None,
    output_format: str,
    aspect_ratio: str,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "prompt": prompt,
        "output_format": output_format,
        # An uploaded image dictates the framing.
        "aspect_ratio": "match_input_image" if image_url else aspect_ratio,
    }
    if image_url:
        payload["input_image"] = image_url
    return payload


def post_generate(*, client: HttpClient, base_url: str, payload: dict[str, Any]) -> HttpResult:
    url = join_api(base_url, "/v1/images/generate")
    return client.post_json(url, payload)


def run_editor(
    *,
    client: HttpClient,
    base_url: str,
    access_token: str,
    image_path: str | None,
    prompt: str,
    output_format: str,
    aspect_ratio: str,
) -> EditorOutcome:
    if not (prompt or "").strip():
        return EditorOutcome(status="failed", message="Please enter a prompt")

    image_url = None
    if image_path:
        res = upload_image(client=client, base_url=base_url, image_path=image_path, access_token=access_token)
        body = safe_json_or_text(res.body_bytes)
        if not res.ok:
            return EditorOutcome(
                status="failed",
                message=error_message(res.body_bytes, fallback="Failed to upload image"),
                response=body,
            )
        image_url = body["url"]

    payload = build_generate_payload(
        prompt=prompt,
        image_url=image_url,
        output_format=output_format,
        aspect_ratio=aspect_ratio,
    )
    res = post_generate(client=client, base_url=base_url, payload=payload)
    body = safe_json_or_text(res.body_bytes)
    if not res.ok or not isinstance(body, dict):
        return EditorOutcome(
            status="failed",
            message=error_message(res.body_bytes, fallback=f"HTTP {res.status_code}"),
            response=body,
        )

    status = body.get("status") or "failed"
    if status == "succeeded" and body.get("output"):
        return EditorOutcome(status=status, message="Done", output_url=body["output"], response=body)
    return EditorOutcome(status=status, message=body.get("error") or "Generation failed", response=body)

"""Manual end-to-end check against a running server.

1) POST /v1/images/upload with a local image (needs a Supabase access token).
2) POST /v1/images/generate with the returned URL and a prompt.

    API_BASE_URL=http://localhost:8000 ACCESS_TOKEN=... python test/generate_image.py cat.jpg "make it snow"
"""

from __future__ import annotations

import os
import sys

import requests


def main() -> None:
    base_url = (os.getenv("API_BASE_URL") or "http://localhost:8000").rstrip("/")
    token = (os.getenv("ACCESS_TOKEN") or "").strip()

    image_path = sys.argv[1] if len(sys.argv) > 1 else ""
    prompt = sys.argv[2] if len(sys.argv) > 2 else "Turn this into a watercolor painting"

    payload = {"prompt": prompt, "output_format": "png"}

    if image_path:
        with open(image_path, "rb") as f:
            resp = requests.post(
                f"{base_url}/v1/images/upload",
                files={"image": (os.path.basename(image_path), f, "image/jpeg")},
                headers={"Authorization": f"Bearer {token}"},
                timeout=60,
            )
        print("upload:", resp.status_code, resp.json())
        resp.raise_for_status()
        payload["input_image"] = resp.json()["url"]

    resp = requests.post(f"{base_url}/v1/images/generate", json=payload, timeout=300)
    print("generate:", resp.status_code, resp.json())


if __name__ == "__main__":
    main()

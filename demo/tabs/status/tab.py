from __future__ import annotations

import gradio as gr

from demo.components.result_viewers import safe_json_or_text
from demo.http_client import HttpClient
from demo.utils import join_api


def build_status_tab(*, base_url: gr.Textbox, timeout: gr.Number) -> None:
    endpoint = gr.Dropdown(
        label="Endpoint",
        choices=["/healthz", "/readyz"],
        value="/readyz",
    )
    run = gr.Button("Call")
    out = gr.JSON(label="Response")

    def _call(api_base_url: str, timeout_seconds: float, ep: str):
        client = HttpClient(timeout_seconds=float(timeout_seconds))
        try:
            res = client.get(join_api(api_base_url, ep))
        except Exception as exc:
            return {"error": str(exc)}
        return safe_json_or_text(res.body_bytes)

    run.click(_call, inputs=[base_url, timeout, endpoint], outputs=[out])

from __future__ import annotations

import gradio as gr

from demo.http_client import HttpClient
from demo.tabs.image_editor.api import ASPECT_RATIO_CHOICES, OUTPUT_FORMAT_CHOICES, run_editor


def build_image_editor_tab(*, base_url: gr.Textbox, timeout: gr.Number, access_token: gr.Textbox) -> None:
    with gr.Row():
        with gr.Column(scale=5):
            input_image = gr.Image(label="Input image (optional)", type="filepath", sources=["upload"])
            prompt = gr.Textbox(
                label="Transformation prompt",
                lines=3,
                placeholder="Turn this photo into a watercolor painting",
            )
            with gr.Row():
                output_format = gr.Dropdown(label="Output format", choices=OUTPUT_FORMAT_CHOICES, value="jpg")
                aspect_ratio = gr.Dropdown(label="Aspect ratio", choices=ASPECT_RATIO_CHOICES, value="1:1")
            ratio_note = gr.Markdown("", visible=False)
            run = gr.Button("Generate", variant="primary")

        with gr.Column(scale=5):
            status = gr.Markdown("")
            image_out = gr.Image(label="Result", type="filepath", interactive=False)
            json_out = gr.JSON(label="Response")

    def _toggle_ratio(image_path: str | None):
        has_image = bool(image_path)
        return (
            gr.update(interactive=not has_image),
            gr.update(value="Aspect ratio will match the uploaded image", visible=has_image),
        )

    def _call(
        api_base_url: str,
        timeout_seconds: float,
        token: str,
        image_path: str | None,
        p: str,
        fmt: str,
        ratio: str,
    ):
        client = HttpClient(timeout_seconds=float(timeout_seconds))
        try:
            outcome = run_editor(
                client=client,
                base_url=api_base_url,
                access_token=token,
                image_path=image_path,
                prompt=p,
                output_format=fmt,
                aspect_ratio=ratio,
            )
        except Exception as exc:
            return "**Error**: " + str(exc), None, {"error": str(exc)}

        label = f"**{outcome.status}**: {outcome.message}"
        return label, outcome.output_url, outcome.response

    # Events
    input_image.change(_toggle_ratio, inputs=[input_image], outputs=[aspect_ratio, ratio_note])
    run.click(
        _call,
        inputs=[base_url, timeout, access_token, input_image, prompt, output_format, aspect_ratio],
        outputs=[status, image_out, json_out],
    )

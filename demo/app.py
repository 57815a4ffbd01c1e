from __future__ import annotations

import gradio as gr

from demo.config import DemoConfig
from demo.tabs.image_editor.tab import build_image_editor_tab
from demo.tabs.status.tab import build_status_tab


def build_app() -> gr.Blocks:
    cfg = DemoConfig.from_env()

    with gr.Blocks(title="AI Image Editor") as demo:
        gr.Markdown("# AI Image Editor\nUpload an image (optional), describe the change, and generate.")

        with gr.Row():
            base_url = gr.Textbox(
                label="API Base URL",
                value=cfg.api_base_url,
                interactive=True,
                placeholder="http://localhost:8000",
            )
            timeout = gr.Number(label="Timeout (sec)", value=float(cfg.timeout_seconds), precision=0)
            access_token = gr.Textbox(
                label="Access token (needed for uploads)",
                value=cfg.access_token,
                type="password",
            )

        with gr.Tabs():
            with gr.Tab(label="Image Editor"):
                build_image_editor_tab(base_url=base_url, timeout=timeout, access_token=access_token)

            with gr.Tab(label="Status"):
                build_status_tab(base_url=base_url, timeout=timeout)

    return demo


def main() -> None:
    demo = build_app()
    demo.queue()
    demo.launch(server_name="0.0.0.0", server_port=7860)


if __name__ == "__main__":
    main()

from __future__ import annotations

import logging
from functools import partial
from typing import Any

import anyio

from app.core.errors.exceptions import ConfigurationError, InvalidInputError, UpstreamError
from app.core.inference.replicate import ReplicateClient, UpstreamResponse
from app.domains.image_generation.schemas import (
    ASPECT_RATIOS,
    OUTPUT_FORMATS,
    GenerateImageRequest,
    GenerationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FORMAT = "jpg"
DEFAULT_ASPECT_RATIO = "1:1"
MATCH_INPUT_ASPECT_RATIO = "match_input_image"

FIXED_SAFETY_TOLERANCE = 2
FIXED_PROMPT_UPSAMPLING = False

GENERATION_FAILED_MESSAGE = "Generation failed"
IN_PROGRESS_MESSAGE = "Generation is still in progress. Please try again."
UPSTREAM_FAILED_MESSAGE = "Failed to generate image"


def resolve_output_format(value: Any) -> str:
    if isinstance(value, str) and value in OUTPUT_FORMATS:
        return value
    return DEFAULT_OUTPUT_FORMAT


def resolve_aspect_ratio(value: Any, *, has_input_image: bool) -> str:
    if isinstance(value, str) and value in ASPECT_RATIOS:
        return value
    return MATCH_INPUT_ASPECT_RATIO if has_input_image else DEFAULT_ASPECT_RATIO


def require_prompt(value: Any) -> str:
    prompt = value.strip() if isinstance(value, str) else ""
    if not prompt:
        raise InvalidInputError("Prompt is required")
    return prompt


def build_model_input(payload: GenerateImageRequest) -> dict[str, Any]:
    """Validate the request and build the normalized model input."""
    prompt = require_prompt(payload.prompt)
    has_input_image = bool(payload.input_image)

    model_input: dict[str, Any] = {
        "prompt": prompt,
        "aspect_ratio": resolve_aspect_ratio(payload.aspect_ratio, has_input_image=has_input_image),
        "output_format": resolve_output_format(payload.output_format),
        "safety_tolerance": FIXED_SAFETY_TOLERANCE,
        "prompt_upsampling": FIXED_PROMPT_UPSAMPLING,
    }
    if has_input_image:
        model_input["input_image"] = payload.input_image
    return model_input


def _first_output(output: Any) -> str | None:
    # Some model versions return a list of URLs.
    if isinstance(output, list):
        output = output[0] if output else None
    if not output:
        return None
    return str(output)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def normalize_prediction(body: dict[str, Any]) -> GenerationResult:
    """Map an upstream prediction onto succeeded / failed / processing.

    A present output counts as completion even while upstream still reports
    "processing". No output and no error means the caller should retry.
    """
    prediction_id = str(body.get("id") or "")
    status = body.get("status")
    output = _first_output(body.get("output"))
    error = body.get("error")

    if status in ("succeeded", "processing") and output:
        return GenerationResult(
            id=prediction_id,
            status="succeeded",
            output=output,
            completed_at=_optional_str(body.get("completed_at")),
        )

    if status == "failed" or error:
        return GenerationResult(
            id=prediction_id,
            status="failed",
            error=str(error) if error else GENERATION_FAILED_MESSAGE,
        )

    return GenerationResult(id=prediction_id, status="processing", error=IN_PROGRESS_MESSAGE)


def upstream_error_message(resp: UpstreamResponse) -> str:
    try:
        data = resp.json()
    except ValueError:
        return UPSTREAM_FAILED_MESSAGE
    if not isinstance(data, dict):
        return UPSTREAM_FAILED_MESSAGE
    message = data.get("detail") or data.get("error")
    return str(message) if message else UPSTREAM_FAILED_MESSAGE


async def generate_image(payload: GenerateImageRequest, *, client: ReplicateClient) -> GenerationResult:
    model_input = build_model_input(payload)

    if not client.settings.configured:
        logger.error("REPLICATE_API_TOKEN is not configured")
        raise ConfigurationError()

    logger.info(
        "Sending request to Replicate: prompt=%r has_input_image=%s aspect_ratio=%s output_format=%s",
        model_input["prompt"],
        "input_image" in model_input,
        model_input["aspect_ratio"],
        model_input["output_format"],
    )

    # requests is sync; run in worker thread.
    resp = await anyio.to_thread.run_sync(partial(client.create_prediction, model_input))

    if not resp.ok:
        logger.error("Replicate API error: status=%d body=%s", resp.status_code, resp.text)
        raise UpstreamError(upstream_error_message(resp), http_status=resp.status_code)

    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        raise UpstreamError("Unexpected response from image generation API")

    result = normalize_prediction(body)
    logger.info(
        "Replicate response: id=%s upstream_status=%s status=%s has_output=%s",
        result.id,
        body.get("status"),
        result.status,
        result.output is not None,
    )
    return result

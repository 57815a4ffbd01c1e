from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, field_validator

OutputFormat = Literal["jpg", "png", "webp"]
AspectRatio = Literal["1:1", "16:9", "21:9", "3:2", "4:3", "9:16", "2:3", "match_input_image"]
GenerationStatus = Literal["succeeded", "failed", "processing"]

OUTPUT_FORMATS: tuple[str, ...] = ("jpg", "png", "webp")
ASPECT_RATIOS: tuple[str, ...] = ("1:1", "16:9", "21:9", "3:2", "4:3", "9:16", "2:3", "match_input_image")


class GenerateImageRequest(BaseModel):
    """Inbound body. Unusable values become None instead of failing validation;
    the service applies the fallbacks."""

    prompt: str | None = None
    input_image: str | None = None
    output_format: OutputFormat | None = None
    aspect_ratio: AspectRatio | None = None

    @field_validator("prompt", "input_image", mode="before")
    @classmethod
    def _strings_only(cls, value: Any) -> str | None:
        if not isinstance(value, str) or not value:
            return None
        return value

    @field_validator("output_format", mode="before")
    @classmethod
    def _known_output_format(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value in OUTPUT_FORMATS else None

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def _known_aspect_ratio(cls, value: Any) -> str | None:
        return value if isinstance(value, str) and value in ASPECT_RATIOS else None


class GenerationResult(BaseModel):
    id: str
    status: GenerationStatus
    output: str | None = None
    error: str | None = None
    completed_at: str | None = None

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import get_replicate
from app.core.inference.replicate import ReplicateClient
from app.domains.image_generation.schemas import GenerateImageRequest, GenerationResult
from app.domains.image_generation.service import generate_image

router = APIRouter(tags=["image-generation"])


@router.post(
    "/images/generate",
    response_model=GenerationResult,
    response_model_exclude_none=True,
)
async def generate_image_endpoint(
    payload: GenerateImageRequest,
    client: ReplicateClient = Depends(get_replicate),
):
    return await generate_image(payload, client=client)

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from app.core.config import Settings
from app.core.deps import get_current_user, get_settings, get_storage, get_supabase
from app.core.identity.supabase_client import AuthenticatedUser, SupabaseGateway
from app.core.storage.r2 import R2Storage
from app.domains.image_upload.schemas import UploadImageResponse
from app.domains.image_upload.service import upload_image

router = APIRouter(tags=["image-upload"])


@router.post("/images/upload", response_model=UploadImageResponse)
async def upload_image_endpoint(
    user: AuthenticatedUser = Depends(get_current_user),
    image: UploadFile | None = File(default=None),
    storage: R2Storage = Depends(get_storage),
    supabase: SupabaseGateway = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    asset = await upload_image(image, user=user, storage=storage, settings=settings, supabase=supabase)
    return UploadImageResponse(
        url=asset.url,
        filename=asset.filename,
        size=asset.size,
        type=asset.mime_type,
        path=asset.path,
    )
